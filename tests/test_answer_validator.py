from __future__ import annotations

import logging

import pytest

from aivault.domain.defs import SolutionDef
from aivault.services import answer_validator
from aivault.services.answer_validator import to_number, validate, validate_breakdown


def _solution(kind: str, **params: object) -> SolutionDef:
    return SolutionDef(kind=kind, params=params)


@pytest.mark.parametrize(
    "solution, answer, expected",
    [
        (_solution("exact", value="Escalate"), "  escalate ", True),
        (_solution("exact", value="escalate"), "approve", False),
        (_solution("exact", value="escalate"), None, False),
        (_solution("number", value=42), "42", True),
        (_solution("number", value=42), 42.0, True),
        (_solution("number", value=42), "forty-two", False),
        (_solution("number", value=0), "", False),
        (_solution("range", min=60, max=70), 60, True),
        (_solution("range", min=60, max=70), "70", True),
        (_solution("range", min=60, max=70), 70.5, False),
        (_solution("range", min=60, max=70), [65], False),
        (_solution("order", value=["a", "b", "c"]), ["a", "b", "c"], True),
        (_solution("order", value=["a", "b", "c"]), ("a", "b", "c"), True),
        (_solution("order", value=["a", "b", "c"]), ["b", "a", "c"], False),
        (_solution("order", value=["a", "b"]), "ab", False),
        (_solution("multi-value", values=[32, 64]), ["32", 64], True),
        (_solution("multi-value", values=[32, 64]), [32, 64, 128], True),
        (_solution("multi-value", values=[32, 64]), [32], False),
        (_solution("multi-value", values=[32, 64]), [64, 32], False),
        (_solution("blanks", values={"b1": "if", "b2": "else"}), {"b1": " if", "b2": "else "}, True),
        (_solution("blanks", values={"b1": "if", "b2": "else"}), {"b1": "IF", "b2": "else"}, False),
        (_solution("blanks", values={"b1": "if", "b2": "else"}), {"b1": "if"}, False),
        (_solution("blanks", values={"b1": "if"}), ["if"], False),
        (_solution("multi-choice", values=["a", "b"]), ["b", "a"], True),
        (_solution("multi-choice", values=["a", "b"]), ["a"], False),
        (_solution("multi-choice", values=["a", "b"]), ["a", "b", "c"], False),
        (_solution("multi-choice", values=["a"]), [["a"]], False),
        (_solution("grid", grid=[["A", "I"], ["M", "L"]]), [["A", "I"], ["M", "L"]], True),
        (_solution("grid", grid=[["A", "I"], ["M", "L"]]), [["A", "I"], ["L", "M"]], False),
        (_solution("grid", grid=[["A"]]), "A", False),
    ],
)
def test_validate_kinds(solution: SolutionDef, answer: object, expected: bool) -> None:
    assert validate(solution, answer) is expected


def test_unknown_kind_is_false_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    solution = _solution("telepathy", value="anything")
    with caplog.at_level(logging.ERROR, logger="aivault.services.answer_validator"):
        assert validate(solution, "anything") is False
        assert validate(solution, "anything") is False
    assert "Unknown solution type: telepathy" in caplog.text


def test_missing_solution_is_false() -> None:
    assert validate(None, "x") is False


_SAMPLE_SOLUTIONS = {
    "exact": _solution("exact", value="x"),
    "number": _solution("number", value=1),
    "range": _solution("range", min=1, max=2),
    "order": _solution("order", value=["x"]),
    "multi-value": _solution("multi-value", values=[1]),
    "blanks": _solution("blanks", values={"x": "x"}),
    "multi-choice": _solution("multi-choice", values=["x"]),
    "grid": _solution("grid", grid=[["x"]]),
}


def test_every_checker_has_a_sample() -> None:
    assert set(_SAMPLE_SOLUTIONS) == set(answer_validator._CHECKERS)


@pytest.mark.parametrize("kind", sorted(_SAMPLE_SOLUTIONS))
def test_validate_is_deterministic(kind: str) -> None:
    solution = _SAMPLE_SOLUTIONS[kind]
    answers = ["x", ["x"], {"x": "x"}, 1.5, None, [["x"]]]
    for answer in answers:
        assert validate(solution, answer) == validate(solution, answer)


def test_breakdown_reports_blanks_per_key() -> None:
    solution = _solution("blanks", values={"line1": ":", "line2": ")"})
    assert validate_breakdown(solution, {"line1": ":", "line2": "]"}) == {"line1": True, "line2": False}


def test_breakdown_reports_multi_value_per_index() -> None:
    solution = _solution("multi-value", values=[32, 64])
    assert validate_breakdown(solution, [32]) == {"0": True, "1": False}


def test_breakdown_single_answer_for_other_kinds() -> None:
    assert validate_breakdown(_solution("exact", value="a"), "A") == {"answer": True}


@pytest.mark.parametrize(
    "value, expected",
    [("3.5", 3.5), (" 7 ", 7.0), (True, 1.0), ("", None), ("nan", None), ("abc", None), ("inf", None), ([1], None), (None, None)],
)
def test_to_number(value: object, expected: float | None) -> None:
    assert to_number(value) == expected
