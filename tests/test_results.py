import pytest

from results import (
    DetailClass, Outcome, OutcomeKind, classify_detail_code, fold_outcomes,
    parse_detail_code,
)


@pytest.mark.parametrize("code", [0xFD, 0xFE])
def test_soft_codes(code):
    assert classify_detail_code(code) is DetailClass.SOFT


@pytest.mark.parametrize("code", [0x00, 0x01, 0xFC, 0xFF, 0x1FD, 2**64 - 1])
def test_everything_else_is_hard(code):
    assert classify_detail_code(code) is DetailClass.HARD


def test_parse_detail_code():
    assert parse_detail_code("0xfd") == 0xFD
    assert parse_detail_code("fe") == 0xFE
    assert parse_detail_code(" 0x8000000000000001 ") == 0x8000000000000001
    assert parse_detail_code("") is None
    assert parse_detail_code("garbage") is None
    assert parse_detail_code("-0x1") is None


def test_fold_fail_wins_and_stops():
    consumed = []

    def outcomes():
        for o in (Outcome.success(), Outcome.fail("boom"), Outcome.success()):
            consumed.append(o)
            yield o

    result = fold_outcomes(outcomes())
    assert result == Outcome.fail("boom")
    assert len(consumed) == 2


def test_fold_success_and_skip():
    assert fold_outcomes([Outcome.skip("x"), Outcome.success()]).kind is OutcomeKind.SUCCESS
    result = fold_outcomes([], skip_reason="nothing")
    assert result.kind is OutcomeKind.SKIP
    assert result.reason == "nothing"
