"""Choosing which of several running instances acts as master."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

log = logging.getLogger(__name__)


def get_env_var(name: str) -> str:
    """Return a non-empty environment variable, raising if it is unset or empty."""
    value = os.environ.get(name, "")
    if not value:
        raise LookupError(
            "Could not retrieve environment variable, or it had no content. " + name
        )
    return value


def calculate_master(running_pod_names: Iterable[str]) -> str:
    """Return the master: the alphabetically first of the running pod names."""
    log.debug("Calculating current master...")
    names = sorted(running_pod_names)
    if not names:
        raise LookupError("Failed to retrieve list of Kuberhealthy pods")
    master = names[0]
    log.debug("Calculated master as %s", master)
    return master


def i_am_master(
    running_pod_names: Iterable[str], pod_name: str | None = None, force: bool = False
) -> bool:
    """Tell whether this pod is the master.

    With ``force`` the answer is always yes. Without a ``pod_name`` it is read
    from the POD_NAME environment variable. Names compare case-insensitively.
    """
    if force:
        return True
    master = calculate_master(running_pod_names)
    if pod_name is None:
        pod_name = get_env_var("POD_NAME")
    log.debug("My pod hostname is: %s", pod_name)
    if pod_name.lower() == master.lower():
        log.debug("I am master")
        return True
    log.debug("I am NOT master")
    return False