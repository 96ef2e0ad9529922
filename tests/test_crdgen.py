import json
import os
import stat
import subprocess
import sys

import pytest

from khcore.crdgen import CRD_GENERATORS, CrdGenerator, CrdName, main

RECORDER = """#!{python}
import json, os, sys
out = sys.argv[-1].split("=", 1)[1]
os.makedirs(out, exist_ok=True)
with open(os.path.join(out, "args.json"), "w") as handle:
    json.dump({{"args": sys.argv[1:], "cwd": os.getcwd()}}, handle)
"""

FAILING = """#!{python}
import sys
sys.exit(3)
"""


def _script(tmp_path, name, body):
    path = tmp_path / name
    path.write_text(body.format(python=sys.executable))
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return str(path)


def _generator(tmp_path, customize=None):
    controller = tmp_path / "api"
    controller.mkdir(exist_ok=True)
    return CrdGenerator(
        controller_gen_opts="crd:crdVersions=v1",
        yaml_dir=str(tmp_path / "out"),
        crd_api_group="comcast.github.io",
        controller_path=str(controller),
        crd_names=[CrdName("khstate", "khstates")],
        customize_yaml=customize,
    )


def test_generate_runs_controller_gen(tmp_path):
    binary = _script(tmp_path, "recorder", RECORDER)
    generator = _generator(tmp_path)
    generator.generate_yaml_manifests(binary)
    record = json.loads((tmp_path / "out" / "args.json").read_text())
    out_dir = os.path.abspath(str(tmp_path / "out"))
    assert record["args"] == ["crd:crdVersions=v1", "paths=.", "output:crd:dir=" + out_dir]
    assert os.path.realpath(record["cwd"]) == os.path.realpath(str(tmp_path / "api"))


def test_customize_called_with_generator(tmp_path):
    binary = _script(tmp_path, "recorder", RECORDER)
    seen = []
    generator = _generator(tmp_path, customize=seen.append)
    generator.generate_yaml_manifests(binary)
    assert seen == [generator]


def test_customize_failure_is_wrapped(tmp_path):
    binary = _script(tmp_path, "recorder", RECORDER)

    def broken(generator):
        raise ValueError("bad yaml")

    generator = _generator(tmp_path, customize=broken)
    with pytest.raises(RuntimeError, match="customizing YAML: bad yaml"):
        generator.generate_yaml_manifests(binary)


def test_failing_controller_gen_raises(tmp_path):
    binary = _script(tmp_path, "failing", FAILING)
    with pytest.raises(subprocess.CalledProcessError) as info:
        _generator(tmp_path).generate_yaml_manifests(binary)
    assert info.value.returncode == 3


def test_missing_binary_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        _generator(tmp_path).generate_yaml_manifests(str(tmp_path / "absent"))


def test_default_generators():
    names = [generator.crd_names for generator in CRD_GENERATORS]
    assert names == [
        [CrdName("khcheck", "khchecks")],
        [CrdName("khjob", "khjobs")],
        [CrdName("khstate", "khstates")],
    ]
    assert [g.controller_path for g in CRD_GENERATORS] == [
        "../pkg/apis/khcheck/v1",
        "../pkg/apis/khjob/v1",
        "../pkg/apis/khstate/v1",
    ]
    assert {g.crd_api_group for g in CRD_GENERATORS} == {"comcast.github.io"}


def test_main_fails_without_controller_gen(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(["-controller-gen", str(tmp_path / "absent")]) == 1


def test_main_succeeds_with_working_controller_gen(tmp_path, monkeypatch):
    binary = _script(tmp_path, "recorder", RECORDER)
    workdir = tmp_path / "scripts"
    workdir.mkdir()
    for kind in ("khcheck", "khjob", "khstate"):
        (tmp_path / "pkg" / "apis" / kind / "v1").mkdir(parents=True)
    monkeypatch.chdir(workdir)
    assert main(["--controller-gen", binary]) == 0
    assert (workdir / "generated" / "args.json").exists()