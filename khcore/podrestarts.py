"""Finding pods that keep restarting, from their BackOff warning events."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

DEFAULT_MAX_FAILURES_ALLOWED = 10

_INT32_MIN = -(1 << 31)
_INT32_MAX = (1 << 31) - 1
_INTEGER = re.compile(r"[+-]?\d+")


def parse_max_failures(value: str | None) -> int:
    """Parse the allowed number of failures; empty means the default of 10."""
    if not value:
        return DEFAULT_MAX_FAILURES_ALLOWED
    if not _INTEGER.fullmatch(value):
        raise ValueError(f"Error converting maxFailuresAllowed: {value} to int")
    number = int(value)
    if not _INT32_MIN <= number <= _INT32_MAX:
        raise ValueError(f"Error converting maxFailuresAllowed: {value} to int: out of range")
    return number


@dataclass
class Event:
    """The parts of a cluster event the restart check looks at."""

    involved_name: str
    involved_namespace: str = ""
    involved_kind: str = "Pod"
    reason: str = ""
    count: int = 0
    namespace: str = ""
    type: str = "Warning"


@dataclass
class PodRestartsChecker:
    """Collects pods whose BackOff events exceed the allowed number of failures."""

    namespace: str = ""
    max_failures_allowed: int = DEFAULT_MAX_FAILURES_ALLOWED
    bad_pods: dict[str, str] = field(default_factory=dict)

    def find_bad_pods(self, events: Iterable[Event]) -> dict[str, str]:
        """Record pods with too many BackOff warnings, keyed "namespace/name"."""
        log.info(
            "Checking for pod BackOff events for all pods in the namespace: %s", self.namespace
        )
        for event in events:
            if event.type != "Warning":
                continue
            if self.namespace and event.namespace != self.namespace:
                continue
            if (
                event.involved_kind == "Pod"
                and event.reason == "BackOff"
                and event.count > self.max_failures_allowed
            ):
                message = (
                    f"Found: {event.count} `BackOff` events for pod: {event.involved_name}"
                    f" in namespace: {event.namespace}"
                )
                log.info(message)
                self.bad_pods[f"{event.involved_namespace}/{event.involved_name}"] = message
        return self.bad_pods

    def verify_bad_pods(self, pod_exists: Callable[[str, str], bool]) -> dict[str, str]:
        """Drop bad pods that no longer exist.

        ``pod_exists(namespace, name)`` tells whether a pod is still there. An
        exception whose message says "not found" counts as the pod being gone;
        any other exception propagates.
        """
        for key in list(self.bad_pods):
            namespace, _, pod_name = key.partition("/")
            try:
                exists = pod_exists(namespace, pod_name)
            except Exception as exc:
                if "not found" not in str(exc):
                    log.info("Error getting bad pod: %s %s", pod_name, exc)
                    raise
                exists = False
            if not exists:
                log.info("Bad Pod: %s no longer exists. Removing from bad pods map", pod_name)
                del self.bad_pods[key]
        return self.bad_pods

    def error_messages(self, error: BaseException | str | None = None) -> list[str]:
        """Return the failures to report; an empty list means success."""
        messages: list[str] = []
        if error:
            log.error("%s", error)
            messages.append(str(error))
        messages.extend(self.bad_pods.values())
        return messages