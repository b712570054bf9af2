# results.py
"""Outcome types and classification of IFS failure detail codes."""

import enum
import typing
from dataclasses import dataclass

from config_file import SOFT_DETAIL_CODES


class DetailClass(enum.Enum):
    SOFT = "soft" # Run did not reach a verdict; not a failure
    HARD = "hard"


class OutcomeKind(enum.Enum):
    SUCCESS = "success"
    SKIP = "skip"
    FAIL = "fail"


@dataclass(frozen=True)
class Outcome:
    """Result of one instance, one core, or a whole scan."""
    kind: OutcomeKind
    reason: str = ""

    @classmethod
    def success(cls) -> "Outcome":
        return cls(OutcomeKind.SUCCESS)

    @classmethod
    def skip(cls, reason: str) -> "Outcome":
        return cls(OutcomeKind.SKIP, reason)

    @classmethod
    def fail(cls, detail: str) -> "Outcome":
        return cls(OutcomeKind.FAIL, detail)

    @property
    def is_fail(self) -> bool:
        return self.kind is OutcomeKind.FAIL


def classify_detail_code(code: int) -> DetailClass:
    """Maps a failure detail code to SOFT or HARD.

    Only the two driver-populated codes (software timeout and partial
    completion) are soft; every other value, known or not, is a real
    failure.
    """
    return DetailClass.SOFT if code in SOFT_DETAIL_CODES else DetailClass.HARD


def parse_detail_code(text: str) -> typing.Optional[int]:
    """Parses a hex detail string such as '0xfd' or 'fe'.

    Returns:
        The code, or None if the text is not a non-negative hex number.
    """
    try:
        code = int(text.strip(), 16)
    except ValueError:
        return None
    return code if code >= 0 else None


def fold_outcomes(outcomes: typing.Iterable[Outcome],
                  skip_reason: str = "no test passed") -> Outcome:
    """Folds several outcomes into one.

    The first Fail wins; otherwise Success if anything succeeded, else Skip.
    """
    any_success = False
    for outcome in outcomes:
        if outcome.is_fail:
            return outcome
        if outcome.kind is OutcomeKind.SUCCESS:
            any_success = True
    return Outcome.success() if any_success else Outcome.skip(skip_reason)
