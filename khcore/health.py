"""Overall health state shown on the status page."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, BinaryIO

from khcore.workload import WorkloadDetails

log = logging.getLogger(__name__)


def _escape_html(text: str) -> str:
    return text.replace("<", "\\u003c").replace(">", "\\u003e").replace("&", "\\u0026")


@dataclass
class State:
    """Results of all managed checks and jobs with an overall OK flag."""

    ok: bool = False
    errors: list[str] = field(default_factory=list)
    check_details: dict[str, WorkloadDetails] = field(default_factory=dict)
    job_details: dict[str, WorkloadDetails] = field(default_factory=dict)
    current_master: str = ""

    def add_error(self, *args: str) -> None:
        """Append non-blank errors; blank ones are skipped."""
        for message in args:
            if not message:
                log.warning("add_error was called but the error was blank so it was skipped.")
                continue
            log.debug("Appending error: %s", message)
            self.errors.append(message)

    def _to_dict(self) -> dict[str, Any]:
        return {
            "OK": self.ok,
            "Errors": list(self.errors),
            "CheckDetails": {
                name: self.check_details[name].to_dict() for name in sorted(self.check_details)
            },
            "JobDetails": {
                name: self.job_details[name].to_dict() for name in sorted(self.job_details)
            },
            "CurrentMaster": self.current_master,
        }

    def to_json(self) -> str:
        """Return the state as indented JSON."""
        return _escape_html(json.dumps(self._to_dict(), indent=2))

    def write_http_status_response(self, writer: BinaryIO) -> None:
        """Write the JSON state to a binary writer."""
        data = self.to_json().encode("utf-8")
        try:
            writer.write(data)
        except Exception:
            log.error("Error writing response to caller", exc_info=True)
            raise


def new_state() -> State:
    """Return a fresh state that reports OK with no errors."""
    return State(ok=True)