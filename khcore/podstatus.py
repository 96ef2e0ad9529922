"""Finding pods that have been around long enough and are not in a healthy phase."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum

from khcore.durations import parse_duration

log = logging.getLogger(__name__)

_EPOCH_ZERO = datetime(1, 1, 1, tzinfo=timezone.utc)

# Pods carrying these labels belong to the health checker itself and are ignored.
_EXCLUDED_LABELS = {"app": "kuberhealthy-check", "source": "kuberhealthy"}


class PodPhase(str, Enum):
    """The lifecycle phases a pod can be in."""

    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"


_HEALTHY = {PodPhase.RUNNING, PodPhase.SUCCEEDED}
_UNHEALTHY = {PodPhase.PENDING, PodPhase.FAILED, PodPhase.UNKNOWN}


@dataclass
class Pod:
    """The parts of a pod the status check looks at."""

    name: str
    namespace: str = ""
    phase: PodPhase | str = ""
    creation_timestamp: datetime = _EPOCH_ZERO
    labels: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.phase, PodPhase):
            try:
                self.phase = PodPhase(self.phase)
            except ValueError:
                pass
        if self.creation_timestamp.tzinfo is None:
            self.creation_timestamp = self.creation_timestamp.replace(tzinfo=timezone.utc)

    @property
    def phase_text(self) -> str:
        """The phase as written in messages."""
        return self.phase.value if isinstance(self.phase, PodPhase) else str(self.phase)

    def _selected(self, namespace: str) -> bool:
        if namespace and self.namespace != namespace:
            return False
        return all(self.labels.get(key) != value for key, value in _EXCLUDED_LABELS.items())


def _skip_seconds(skip_duration: str | float | timedelta) -> float:
    if isinstance(skip_duration, timedelta):
        return skip_duration.total_seconds()
    if isinstance(skip_duration, str):
        try:
            return parse_duration(skip_duration)
        except ValueError as exc:
            raise ValueError(f"failed to parse skip duration: {exc}") from exc
    return float(skip_duration)


def find_pods_not_running(
    pods: Iterable[Pod],
    namespace: str = "",
    skip_duration: str | float | timedelta = "",
    now: datetime | None = None,
) -> list[str]:
    """Return a failure message for every old enough pod in an unhealthy phase.

    An empty ``namespace`` looks across all namespaces. Pods created less than
    ``skip_duration`` before ``now`` are skipped. Raises ValueError when the
    skip duration cannot be parsed.
    """
    if namespace:
        log.info("looking for pods in namespace %s", namespace)
    else:
        log.info("looking for pods across all namespaces, this requires a cluster role")

    skip = _skip_seconds(skip_duration)
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    skip_barrier = now - timedelta(seconds=skip)

    selected = sorted(
        (pod for pod in pods if pod._selected(namespace)),
        key=lambda pod: (pod.namespace, pod.name),
    )

    failures: list[str] = []
    for pod in selected:
        if pod.creation_timestamp > skip_barrier:
            log.info("skipping checks on pod because it is too young: %s", pod.name)
            continue
        if pod.phase in _HEALTHY:
            continue
        message = (
            f"pod: {pod.name} in namespace: {pod.namespace} "
            f"is in pod status phase {pod.phase_text} "
        )
        if pod.phase in _UNHEALTHY:
            failures.append(message)
        else:
            log.info(
                "pod: %s in namespace: %s is not in one of the five possible pod status phases %s ",
                pod.name,
                pod.namespace,
                pod.phase_text,
            )
    return failures