# knobs.py
"""Parses the test-specific knobs that steer image selection."""

import typing
from dataclasses import dataclass

KNOB_PREFIX = "ifs."
TEST_FILE_KNOB = "test_file"
ENFORCE_RUN_KNOB = "enforce_run"


class KnobError(ValueError):
    """Raised for unknown knob names or malformed knob values."""


@dataclass(frozen=True)
class Knobs:
    """Overrides for batch selection.

    Attributes:
        test_file: Explicit image id to run instead of the next in sequence.
        enforce_run: Run even though the previous run reported a failure.
    """
    test_file: typing.Optional[int] = None
    enforce_run: bool = False


def _parse_uint(key: str, value: str) -> int:
    try:
        number = int(value, 0)
    except ValueError:
        raise KnobError(f"Knob '{key}' expects an unsigned integer, got '{value}'") from None
    if number < 0:
        raise KnobError(f"Knob '{key}' expects an unsigned integer, got '{value}'")
    return number


def parse_knob_options(options: typing.Iterable[str]) -> Knobs:
    """Builds Knobs from KEY=VALUE strings (e.g. "test_file=0x5").

    Keys may carry the "ifs." test prefix. enforce_run is set only by the
    value 1; any other number leaves it off.

    Raises:
        KnobError: A key is unknown or a value is not an unsigned integer.
    """
    test_file = None
    enforce_run = False

    for option in options:
        key, sep, value = option.partition("=")
        key = key.strip()
        if not sep:
            raise KnobError(f"Expected KEY=VALUE, got '{option}'")
        if key.startswith(KNOB_PREFIX):
            key = key[len(KNOB_PREFIX):]

        if key == TEST_FILE_KNOB:
            test_file = _parse_uint(key, value.strip())
        elif key == ENFORCE_RUN_KNOB:
            enforce_run = _parse_uint(key, value.strip()) == 1
        else:
            raise KnobError(f"Unknown knob '{key}'")

    return Knobs(test_file=test_file, enforce_run=enforce_run)
