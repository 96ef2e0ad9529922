"""Prometheus text output for the health state, and the metrics push interface."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, BinaryIO, Protocol

from khcore.durations import format_duration, parse_duration
from khcore.health import State
from khcore.workload import WorkloadDetails

log = logging.getLogger(__name__)

Metric = list[dict[str, Any]]


@dataclass
class PromMetricsConfig:
    """Options for the error label on check and job metrics."""

    suppress_error_label: bool = False
    error_label_max_length: int = 0


class MetricsClient(Protocol):
    """Something that pushes metrics to a custom provider."""

    def push(self, points: Metric, tags: dict[str, str]) -> None:
        """Push a list of name-to-value metrics with the given tags."""
        ...


def _truncate_bytes(text: str, limit: int) -> str:
    encoded = text.encode("utf-8")
    if len(encoded) <= limit:
        return text
    return encoded[:limit].decode("utf-8", errors="ignore")


def prom_metric_name(
    config: PromMetricsConfig,
    check_or_job: str,
    check_name: str,
    namespace: str,
    status: str,
    errors: list[str],
) -> str:
    """Build the metric name with its labels for one check or job."""
    name = (
        f'kuberhealthy_{check_or_job}{{check="{check_name}",'
        f'namespace="{namespace}",status="{status}"'
    )
    if config.suppress_error_label:
        return name + "}"
    errors_str = "|".join(errors).replace('"', "'")
    if config.error_label_max_length > 0:
        errors_str = _truncate_bytes(errors_str, config.error_label_max_length)
    return name + f',error="{errors_str}"}}'


def _duration_seconds(details: WorkloadDetails, metric_name: str) -> str:
    run_duration = details.run_duration or format_duration(0)
    try:
        seconds = parse_duration(run_duration)
    except ValueError as exc:
        log.error(
            "Error parsing run duration: %s for metric: %s error: %s",
            run_duration,
            metric_name,
            exc,
        )
        seconds = 0.0
    return f"{seconds:f}"


def _workload_metrics(
    details: dict[str, WorkloadDetails], config: PromMetricsConfig, kind: str
) -> tuple[dict[str, str], dict[str, str]]:
    states: dict[str, str] = {}
    durations: dict[str, str] = {}
    for name in sorted(details):
        entry = details[name]
        status = "1" if entry.ok else "0"
        metric_name = prom_metric_name(config, kind, name, entry.namespace, status, entry.errors)
        duration_name = (
            f'kuberhealthy_{kind}_duration_seconds{{check="{name}",namespace="{entry.namespace}"}}'
        )
        states[metric_name] = status
        durations[duration_name] = _duration_seconds(entry, metric_name)
    return states, durations


def _section(name: str, help_text: str, values: dict[str, str]) -> list[str]:
    lines = [f"# HELP {name} {help_text}", f"# TYPE {name} gauge"]
    lines.extend(f"{metric} {value}" for metric, value in values.items())
    return lines


def generate_metrics(state: State, config: PromMetricsConfig) -> str:
    """Render the state in the Prometheus text format."""
    lines = [
        "# HELP kuberhealthy_running Shows if kuberhealthy is running error free",
        "# TYPE kuberhealthy_running gauge",
        f'kuberhealthy_running{{current_master="{state.current_master}"}} 1',
        "# HELP kuberhealthy_cluster_state Shows the status of the cluster",
        "# TYPE kuberhealthy_cluster_state gauge",
        f"kuberhealthy_cluster_state {'1' if state.ok else '0'}",
    ]
    check_states, check_durations = _workload_metrics(state.check_details, config, "check")
    job_states, job_durations = _workload_metrics(state.job_details, config, "job")

    lines += _section(
        "kuberhealthy_check", "Shows the status of a Kuberhealthy check", check_states
    )
    lines += _section(
        "kuberhealthy_check_duration_seconds",
        "Shows the check run duration of a Kuberhealthy check",
        check_durations,
    )
    lines += _section("kuberhealthy_job", "Shows the status of a Kuberhealthy job", job_states)
    lines += _section(
        "kuberhealthy_job_duration_seconds",
        "Shows the job run duration of a Kuberhealthy job",
        job_durations,
    )
    return "\n".join(lines) + "\n"


def error_state_metrics(state: State) -> str:
    """Render the metric that shows the service itself is in error."""
    return (
        "# HELP kuberhealthy_running Shows if kuberhealthy is running error free\n"
        "# TYPE kuberhealthy_running gauge\n"
        f'kuberhealthy_running{{currentMaster="{state.current_master}"}} 0'
    )


def write_metric_error(writer: BinaryIO, state: State) -> None:
    """Write the error-state metric to a binary writer."""
    try:
        writer.write(error_state_metrics(state).encode("utf-8"))
    except Exception:
        log.warning("Error writing health check results to caller", exc_info=True)
        raise