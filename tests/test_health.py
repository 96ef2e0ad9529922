import io
import json

import pytest

from khcore.health import State, new_state
from khcore.workload import WorkloadDetails


def test_new_state_defaults():
    state = new_state()
    assert state.ok is True
    assert state.errors == []
    assert state.check_details == {}
    assert state.job_details == {}
    assert state.current_master == ""


def test_zero_state_not_ok():
    assert State().ok is False


def test_add_error_skips_blank():
    state = new_state()
    state.add_error("first", "", "second")
    state.add_error()
    assert state.errors == ["first", "second"]


def test_to_json_key_order():
    text = new_state().to_json()
    assert list(json.loads(text)) == [
        "OK",
        "Errors",
        "CheckDetails",
        "JobDetails",
        "CurrentMaster",
    ]


def test_to_json_contents_round_trip():
    state = new_state()
    state.current_master = "kh-0"
    state.add_error("bad thing")
    state.check_details["zeta"] = WorkloadDetails(ok=True, namespace="ns")
    state.check_details["alpha"] = WorkloadDetails(errors=["e"])
    state.job_details["job"] = WorkloadDetails(node="n")
    data = json.loads(state.to_json())
    assert data["CurrentMaster"] == "kh-0"
    assert data["Errors"] == ["bad thing"]
    assert list(data["CheckDetails"]) == ["alpha", "zeta"]
    assert WorkloadDetails.from_dict(data["CheckDetails"]["zeta"]) == state.check_details["zeta"]
    assert data["JobDetails"]["job"]["Node"] == "n"


def test_to_json_escapes_html():
    state = new_state()
    state.add_error("<a & b>")
    text = state.to_json()
    assert "<" not in text and ">" not in text and "&" not in text
    assert json.loads(text)["Errors"] == ["<a & b>"]


def test_to_json_is_indented():
    text = new_state().to_json()
    assert '\n  "OK": true' in text


def test_write_http_status_response():
    state = new_state()
    state.add_error("oops")
    buffer = io.BytesIO()
    state.write_http_status_response(buffer)
    assert buffer.getvalue() == state.to_json().encode("utf-8")


class _BrokenWriter:
    def write(self, data):
        raise OSError("closed")


def test_write_http_status_response_propagates_error():
    with pytest.raises(OSError):
        new_state().write_http_status_response(_BrokenWriter())