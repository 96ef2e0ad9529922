"""Workload kinds and the per-workload status record kept for checks and jobs."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class KHWorkload(str, Enum):
    """The kinds of workload: checks run on an interval, jobs run once."""

    KHCHECK = "KHCheck"
    KHJOB = "KHJob"


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _parse_time(text: str) -> datetime:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


@dataclass
class WorkloadDetails:
    """Current status of a single check or job."""

    ok: bool = False
    errors: list[str] = field(default_factory=list)
    run_duration: str = ""
    namespace: str = ""
    node: str = ""
    last_run: datetime | None = None
    authoritative_pod: str = ""
    current_uuid: str = ""
    kh_workload: KHWorkload | None = None

    def get_kh_workload(self) -> KHWorkload:
        """Return the workload kind, raising if it was never set."""
        if not self.kh_workload:
            raise ValueError(
                "fetched a workload type from a WorkloadDetails record, but it was blank"
            )
        return self.kh_workload

    def deep_copy(self) -> WorkloadDetails:
        """Return an independent copy."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Return the serialised form; the workload kind is not serialised."""
        data: dict[str, Any] = {
            "OK": self.ok,
            "Errors": list(self.errors),
            "RunDuration": self.run_duration,
            "Namespace": self.namespace,
            "Node": self.node,
        }
        if self.last_run is not None:
            data["LastRun"] = _format_time(self.last_run)
        data["AuthoritativePod"] = self.authoritative_pod
        data["uuid"] = self.current_uuid
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkloadDetails:
        """Build a record from its serialised form."""
        last_run = data.get("LastRun")
        return cls(
            ok=bool(data.get("OK", False)),
            errors=list(data.get("Errors") or []),
            run_duration=data.get("RunDuration", ""),
            namespace=data.get("Namespace", ""),
            node=data.get("Node", ""),
            last_run=_parse_time(last_run) if last_run else None,
            authoritative_pod=data.get("AuthoritativePod", ""),
            current_uuid=data.get("uuid", ""),
        )


@dataclass
class KuberhealthyState:
    """A named state resource holding the details of one workload."""

    name: str = ""
    spec: WorkloadDetails = field(default_factory=WorkloadDetails)
    namespace: str = ""

    def deep_copy(self) -> KuberhealthyState:
        """Return an independent copy."""
        return copy.deepcopy(self)


def new_workload_details(workload_type: KHWorkload | str) -> WorkloadDetails:
    """Create details for a workload of the given kind."""
    if not workload_type:
        raise ValueError("creating workload details with an empty workload type")
    return WorkloadDetails(errors=[], kh_workload=KHWorkload(workload_type))


def new_kuberhealthy_state(name: str, spec: WorkloadDetails) -> KuberhealthyState:
    """Create a state resource with the given name and details."""
    return KuberhealthyState(name=name, spec=spec)