import pytest

from khcore.durations import format_duration, parse_duration


def test_zero_formats_as_zero_seconds():
    assert format_duration(0) == "0s"


def test_bare_zero_parses():
    assert parse_duration("0") == 0.0


def test_minutes_parse_to_seconds():
    assert parse_duration("10m") == 600


@pytest.mark.parametrize(
    "text", ["1h0m0s", "1m30s", "1.5s", "250ms", "3\u00b5s", "42ns", "-2m5s", "5h7m0s"]
)
def test_round_trip(text):
    assert format_duration(parse_duration(text)) == text


def test_equivalent_spellings_agree():
    assert parse_duration("1h") == parse_duration("60m") == parse_duration("3600s")


def test_sign_negates():
    assert parse_duration("-1.5h") == -parse_duration("1.5h")
    assert parse_duration("+1.5h") == parse_duration("1.5h")


def test_components_add_up():
    assert parse_duration("1h30m") == parse_duration("1h") + parse_duration("30m")


def test_microsecond_spellings_agree():
    assert parse_duration("7us") == parse_duration("7\u00b5s") == parse_duration("7\u03bcs")


@pytest.mark.parametrize("text", ["", "abc", "10x", "10", ".s", "-", "1h-2m"])
def test_invalid_durations_raise(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_overflow_raises():
    with pytest.raises(ValueError):
        parse_duration("9999999999h")


def test_format_then_parse_is_stable():
    for seconds in (0.001, 1.25, 61.0, 3725.5):
        assert parse_duration(format_duration(seconds)) == pytest.approx(seconds)