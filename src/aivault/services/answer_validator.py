"""Pure answer checking for every catalog solution kind."""
from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Dict

from aivault.domain.defs import SolutionDef

logger = logging.getLogger(__name__)

Checker = Callable[[SolutionDef, Any], bool]


def validate(solution: SolutionDef | None, answer: Any) -> bool:
    """Return True when ``answer`` satisfies ``solution``.

    Malformed answers are simply wrong; unknown solution kinds are logged and
    never count as correct.
    """
    if solution is None:
        return False
    checker = _CHECKERS.get(solution.kind)
    if checker is None:
        logger.error("Unknown solution type: %s", solution.kind)
        return False
    return checker(solution, answer)


def validate_breakdown(solution: SolutionDef | None, answer: Any) -> Dict[str, bool]:
    """Return per-field correctness for UI feedback.

    ``blanks`` reports one entry per expected key and ``multi-value`` one entry
    per expected index; every other kind reports a single ``answer`` entry.
    """
    if solution is not None and solution.kind == "blanks":
        expected = solution.get("values") or {}
        provided = answer if isinstance(answer, Mapping) else {}
        return {str(key): _blank_matches(provided, key, value) for key, value in expected.items()}
    if solution is not None and solution.kind == "multi-value":
        expected_values = solution.get("values") or []
        provided_values = answer if _is_sequence(answer) else []
        return {
            str(index): index < len(provided_values) and _numbers_equal(provided_values[index], value)
            for index, value in enumerate(expected_values)
        }
    return {"answer": validate(solution, answer)}


def to_number(value: Any) -> float | None:
    """Coerce ``value`` to a finite float, or return None when it is not numeric."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _normalize_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _numbers_equal(left: Any, right: Any) -> bool:
    left_number = to_number(left)
    right_number = to_number(right)
    return left_number is not None and left_number == right_number


def _blank_matches(provided: Mapping[str, Any], key: str, expected: Any) -> bool:
    if key not in provided:
        return False
    return _normalize_text(provided[key]) == _normalize_text(expected)


def _as_nested_lists(value: Any) -> Any:
    if _is_sequence(value):
        return [_as_nested_lists(item) for item in value]
    return value


def _check_exact(solution: SolutionDef, answer: Any) -> bool:
    return _normalize_text(answer).lower() == _normalize_text(solution.get("value")).lower()


def _check_number(solution: SolutionDef, answer: Any) -> bool:
    return _numbers_equal(answer, solution.get("value"))


def _check_range(solution: SolutionDef, answer: Any) -> bool:
    number = to_number(answer)
    low = to_number(solution.get("min"))
    high = to_number(solution.get("max"))
    if number is None or low is None or high is None:
        return False
    return low <= number <= high


def _check_order(solution: SolutionDef, answer: Any) -> bool:
    if not _is_sequence(answer):
        return False
    return _as_nested_lists(answer) == _as_nested_lists(solution.get("value") or [])


def _check_multi_value(solution: SolutionDef, answer: Any) -> bool:
    if not _is_sequence(answer):
        return False
    expected = solution.get("values") or []
    return all(
        index < len(answer) and _numbers_equal(answer[index], value)
        for index, value in enumerate(expected)
    )


def _check_blanks(solution: SolutionDef, answer: Any) -> bool:
    if not isinstance(answer, Mapping):
        return False
    expected = solution.get("values") or {}
    return all(_blank_matches(answer, key, value) for key, value in expected.items())


def _check_multi_choice(solution: SolutionDef, answer: Any) -> bool:
    if not _is_sequence(answer):
        return False
    try:
        return set(answer) == set(solution.get("values") or [])
    except TypeError:
        return False


def _check_grid(solution: SolutionDef, answer: Any) -> bool:
    if not _is_sequence(answer):
        return False
    return _as_nested_lists(answer) == _as_nested_lists(solution.get("grid") or [])


_CHECKERS: Dict[str, Checker] = {
    "exact": _check_exact,
    "number": _check_number,
    "range": _check_range,
    "order": _check_order,
    "multi-value": _check_multi_value,
    "blanks": _check_blanks,
    "multi-choice": _check_multi_choice,
    "grid": _check_grid,
}
