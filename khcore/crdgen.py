"""Generates CRD manifests by running controller-gen over the API packages."""

from __future__ import annotations

import argparse
import logging
import os
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CrdName:
    """Singular and plural name of a custom resource."""

    singular: str
    plural: str


@dataclass
class CrdGenerator:
    """One controller-gen run over an API package."""

    controller_gen_opts: str
    yaml_dir: str
    crd_api_group: str
    controller_path: str
    crd_names: list[CrdName] = field(default_factory=list)
    customize_yaml: Callable[[CrdGenerator], None] | None = None

    def generate_yaml_manifests(self, controller_gen: str = "controller-gen") -> None:
        """Run controller-gen, then the customisation step if there is one.

        Raises CalledProcessError when controller-gen fails and RuntimeError
        when customisation fails.
        """
        output_dir = os.path.abspath(self.yaml_dir)
        working_dir = os.path.abspath(self.controller_path)
        log.info("running binary: %s", controller_gen)
        command = [
            controller_gen,
            self.controller_gen_opts,
            "paths=.",
            "output:crd:dir=" + output_dir,
        ]
        try:
            subprocess.run(command, cwd=working_dir, check=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            log.error("failed to run command %s", exc)
            raise

        if self.customize_yaml is None:
            return
        try:
            self.customize_yaml(self)
        except Exception as exc:
            raise RuntimeError(f"customizing YAML: {exc}") from exc


CRD_GENERATORS: list[CrdGenerator] = [
    CrdGenerator(
        controller_gen_opts="crd:crdVersions=v1,preserveUnknownFields=false",
        yaml_dir="./generated",
        crd_api_group="comcast.github.io",
        controller_path="../pkg/apis/khcheck/v1",
        crd_names=[CrdName("khcheck", "khchecks")],
    ),
    CrdGenerator(
        controller_gen_opts="crd:crdVersions=v1,preserveUnknownFields=false",
        yaml_dir="./generated",
        crd_api_group="comcast.github.io",
        controller_path="../pkg/apis/khjob/v1",
        crd_names=[CrdName("khjob", "khjobs")],
    ),
    CrdGenerator(
        controller_gen_opts="crd:crdVersions=v1",
        yaml_dir="./generated",
        crd_api_group="comcast.github.io",
        controller_path="../pkg/apis/khstate/v1",
        crd_names=[CrdName("khstate", "khstates")],
    ),
]


def main(argv: Sequence[str] | None = None) -> int:
    """Generate all CRD manifests; return 0 on success and 1 on the first failure."""
    parser = argparse.ArgumentParser(description="Generate CRD manifests.")
    parser.add_argument(
        "-controller-gen",
        "--controller-gen",
        dest="controller_gen",
        default="controller-gen",
        help="controller-gen binary path",
    )
    parser.add_argument(
        "-gojsontoyaml",
        "--gojsontoyaml",
        dest="gojsontoyaml",
        default="gojsontoyaml",
        help="gojsontoyaml binary path",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    for generator in CRD_GENERATORS:
        try:
            generator.generate_yaml_manifests(args.controller_gen)
        except Exception as exc:
            log.error("generating YAML manifests: %s", exc)
            return 1
    return 0