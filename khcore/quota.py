"""Resource quota usage check: flags namespaces whose CPU or memory use reaches a threshold."""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

# Usage at or above 90% of the limit is reported.
DEFAULT_THRESHOLD = 0.9

# Default time the whole check may take, in seconds.
DEFAULT_CHECK_TIME_LIMIT = 5 * 60.0

_TRUE_WORDS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_WORDS = {"0", "f", "F", "FALSE", "false", "False"}


def parse_bool(text: str) -> bool:
    """Parse a boolean the way flags and environment values are written."""
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ValueError(f'parsing "{text}": invalid syntax')


@dataclass
class QuotaSettings:
    """Which namespaces to look at, the alert threshold and the time limit."""

    blacklist: list[str] = field(default_factory=list)
    whitelist: list[str] = field(default_factory=list)
    threshold: float = DEFAULT_THRESHOLD
    debug: bool = False
    check_time_limit: float = DEFAULT_CHECK_TIME_LIMIT


@dataclass
class ResourceQuota:
    """Used and hard limits of one quota, in thousandths of a unit."""

    cpu_used: int = 0
    cpu_limit: int = 0
    memory_used: int = 0
    memory_limit: int = 0


def parse_settings(environ: Mapping[str, str] | None = None) -> QuotaSettings:
    """Read DEBUG, BLACKLIST, WHITELIST and THRESHOLD from the environment.

    A threshold above 0.99 or at most 0 falls back to the default. Raises
    ValueError when DEBUG or THRESHOLD cannot be parsed.
    """
    if environ is None:
        environ = os.environ
    settings = QuotaSettings()

    debug_env = environ.get("DEBUG", "")
    if debug_env:
        try:
            settings.debug = parse_bool(debug_env)
        except ValueError as exc:
            raise ValueError(f"failed to parse DEBUG environment variable: {exc}") from exc
    if settings.debug:
        log.info("Debug logging enabled.")

    blacklist_env = environ.get("BLACKLIST", "")
    if blacklist_env:
        settings.blacklist = blacklist_env.split(",")
        log.info("Parsed BLACKLIST: %s", settings.blacklist)

    whitelist_env = environ.get("WHITELIST", "")
    if whitelist_env:
        settings.whitelist = whitelist_env.split(",")
        log.info("Parsed WHITELIST: %s", settings.whitelist)

    threshold_env = environ.get("THRESHOLD", "")
    if threshold_env:
        try:
            settings.threshold = float(threshold_env)
        except ValueError as exc:
            raise ValueError(
                f"error occurred attempting to parse THRESHOLD: {exc}"
            ) from exc
        log.info("Parsed THRESHOLD: %s", settings.threshold)
    if settings.threshold > 0.99:
        log.info(
            "Given THRESHOLD is greater than 0.99, setting to default of %s", DEFAULT_THRESHOLD
        )
        settings.threshold = DEFAULT_THRESHOLD
    if settings.threshold <= 0:
        log.info(
            "Threshold is less than or equal to 0, setting to default of %s", DEFAULT_THRESHOLD
        )
        settings.threshold = DEFAULT_THRESHOLD
    log.info("Usage threshold set to: %s", settings.threshold)
    return settings


def should_examine(namespace: str, settings: QuotaSettings) -> bool:
    """Tell whether a namespace is looked at; the blacklist wins over the whitelist."""
    if settings.blacklist and namespace in settings.blacklist:
        log.info("Skipping %s namespace (Blacklist).", namespace)
        return False
    if settings.whitelist and namespace not in settings.whitelist:
        log.info("Skipping %s namespace (Whitelist).", namespace)
        return False
    return True


def _ratio(used: int, limit: int) -> float:
    if limit:
        return used / limit
    if used > 0:
        return math.inf
    if used < 0:
        return -math.inf
    return math.nan


def _format_float(value: float, width: int, precision: int) -> str:
    if math.isnan(value):
        text = "NaN"
    elif math.isinf(value):
        text = "+Inf" if value > 0 else "-Inf"
    else:
        return f"{value:{width}.{precision}f}"
    return text.rjust(width)


def examine_quota(namespace: str, quota: ResourceQuota, threshold: float) -> list[str]:
    """Return a message for CPU and for memory when usage reaches the threshold."""
    messages: list[str] = []
    checks = (
        ("cpu", quota.cpu_used, quota.cpu_limit),
        ("memory", quota.memory_used, quota.memory_limit),
    )
    for resource, used, limit in checks:
        percent_used = _ratio(used, limit)
        log.debug("Current used for %s %s: %d limit: %d", namespace, resource, used, limit)
        if percent_used >= threshold:
            messages.append(
                f"{resource} for {namespace} namespace has reached threshold of "
                f"{_format_float(threshold, 4, 2)}: USED: {used} LIMIT: {limit} "
                f"PERCENT_USED: {_format_float(percent_used, 6, 3)}"
            )
    return messages


def _examine_namespace(
    namespace: str,
    list_quotas: Callable[[str], Iterable[ResourceQuota]],
    threshold: float,
) -> list[str]:
    log.info("Looking at resource quotas for %s namespace.", namespace)
    try:
        quotas = list(list_quotas(namespace))
    except Exception as exc:
        return [f"error occurred listing resource quotas for {namespace} namespace {exc}"]
    return [
        message for quota in quotas for message in examine_quota(namespace, quota, threshold)
    ]


def examine_resource_quotas(
    namespaces: Iterable[str],
    list_quotas: Callable[[str], Iterable[ResourceQuota]],
    settings: QuotaSettings,
) -> list[str]:
    """Examine every selected namespace concurrently and collect all messages.

    ``list_quotas(namespace)`` returns the quotas of a namespace; a failure to
    list them becomes a message. Messages come in namespace order. Raises
    TimeoutError when the check takes longer than the settings allow.
    """
    targets = [namespace for namespace in namespaces if should_examine(namespace, settings)]
    log.info("%d namespaces to look at.", len(targets))
    if not targets:
        return []

    pool = ThreadPoolExecutor(max_workers=len(targets))
    futures = [
        pool.submit(_examine_namespace, namespace, list_quotas, settings.threshold)
        for namespace in targets
    ]
    _, pending = wait(futures, timeout=settings.check_time_limit)
    if pending:
        pool.shutdown(wait=False, cancel_futures=True)
        raise TimeoutError("Check took too long and timed out.")
    pool.shutdown(wait=True)
    return [message for future in futures for message in future.result()]