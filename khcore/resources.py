"""Check and job resources: what to run, how often, and with which extra metadata."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


def _metadata(name: str, namespace: str) -> dict[str, str]:
    meta: dict[str, str] = {}
    if name:
        meta["name"] = name
    if namespace:
        meta["namespace"] = namespace
    return meta


def _type_meta(api_version: str, kind: str) -> dict[str, str]:
    data: dict[str, str] = {}
    if kind:
        data["kind"] = kind
    if api_version:
        data["apiVersion"] = api_version
    return data


@dataclass
class CheckConfig:
    """How an external check runs: its interval, timeout and pod spec."""

    run_interval: str = ""
    timeout: str = ""
    pod_spec: dict[str, Any] = field(default_factory=dict)
    extra_annotations: dict[str, str] = field(default_factory=dict)
    extra_labels: dict[str, str] = field(default_factory=dict)

    def deep_copy(self) -> CheckConfig:
        """Return an independent copy."""
        return copy.deepcopy(self)

    def _to_dict(self) -> dict[str, Any]:
        return {
            "runInterval": self.run_interval,
            "timeout": self.timeout,
            "podSpec": copy.deepcopy(self.pod_spec),
            "extraAnnotations": dict(self.extra_annotations),
            "extraLabels": dict(self.extra_labels),
        }


@dataclass
class KuberhealthyCheck:
    """A check resource: a named, namespaced check configuration."""

    name: str = ""
    namespace: str = ""
    spec: CheckConfig = field(default_factory=CheckConfig)
    api_version: str = ""
    kind: str = ""

    def deep_copy(self) -> KuberhealthyCheck:
        """Return an independent copy."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Return the serialised resource."""
        data: dict[str, Any] = _type_meta(self.api_version, self.kind)
        data["metadata"] = _metadata(self.name, self.namespace)
        data["spec"] = self.spec._to_dict()
        return data


@dataclass
class KuberhealthyCheckList:
    """A list of check resources."""

    items: list[KuberhealthyCheck] = field(default_factory=list)
    resource_version: str = ""

    def deep_copy(self) -> KuberhealthyCheckList:
        """Return an independent copy."""
        return copy.deepcopy(self)

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


class JobPhase(str, Enum):
    """The phase a job is in."""

    RUNNING = "Running"
    COMPLETED = "Completed"


@dataclass
class JobConfig:
    """How an external job runs: its phase, timeout and pod spec."""

    phase: JobPhase | None = None
    timeout: str = ""
    pod_spec: dict[str, Any] = field(default_factory=dict)
    extra_annotations: dict[str, str] = field(default_factory=dict)
    extra_labels: dict[str, str] = field(default_factory=dict)

    def deep_copy(self) -> JobConfig:
        """Return an independent copy."""
        return copy.deepcopy(self)

    def _to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value if self.phase is not None else "",
            "timeout": self.timeout,
            "podSpec": copy.deepcopy(self.pod_spec),
            "extraAnnotations": dict(self.extra_annotations),
            "extraLabels": dict(self.extra_labels),
        }


@dataclass
class KuberhealthyJob:
    """A job resource: a named, namespaced job configuration."""

    name: str = ""
    namespace: str = ""
    spec: JobConfig = field(default_factory=JobConfig)
    api_version: str = ""
    kind: str = ""

    def deep_copy(self) -> KuberhealthyJob:
        """Return an independent copy."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Return the serialised resource."""
        data: dict[str, Any] = _type_meta(self.api_version, self.kind)
        data["metadata"] = _metadata(self.name, self.namespace)
        data["spec"] = self.spec._to_dict()
        return data


@dataclass
class KuberhealthyJobList:
    """A list of job resources."""

    items: list[KuberhealthyJob] = field(default_factory=list)
    resource_version: str = ""

    def deep_copy(self) -> KuberhealthyJobList:
        """Return an independent copy."""
        return copy.deepcopy(self)

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


def new_kuberhealthy_check(name: str, namespace: str, spec: CheckConfig) -> KuberhealthyCheck:
    """Create a check resource with the given name, namespace and configuration."""
    return KuberhealthyCheck(name=name, namespace=namespace, spec=spec)


def new_kuberhealthy_job(name: str, namespace: str, spec: JobConfig) -> KuberhealthyJob:
    """Create a job resource with the given name, namespace and configuration."""
    return KuberhealthyJob(name=name, namespace=namespace, spec=spec)