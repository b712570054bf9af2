import pytest

from knobs import KnobError, Knobs, parse_knob_options


def test_defaults():
    assert parse_knob_options([]) == Knobs()


def test_test_file_and_enforce():
    knobs = parse_knob_options(["test_file=0x5", "enforce_run=1"])
    assert knobs == Knobs(test_file=5, enforce_run=True)


def test_prefixed_names():
    knobs = parse_knob_options(["ifs.test_file=12", "ifs.enforce_run=1"])
    assert knobs.test_file == 12
    assert knobs.enforce_run


def test_enforce_requires_exactly_one():
    assert parse_knob_options(["enforce_run=2"]).enforce_run is False
    assert parse_knob_options(["enforce_run=0"]).enforce_run is False


@pytest.mark.parametrize("option", ["test_file", "test_file=abc", "test_file=-1", "bogus=1"])
def test_invalid_options(option):
    with pytest.raises(KnobError):
        parse_knob_options([option])
