"""Puzzle scoring rules."""
from __future__ import annotations

DEFAULT_PUZZLE_POINTS = 100
ATTEMPT_PENALTY = 20
MINIMUM_PUZZLE_SCORE = 10


def calculate_score(points: int | None, attempts: int) -> int:
    """Return the score for a puzzle solved after ``attempts`` submissions."""
    base = points if points else DEFAULT_PUZZLE_POINTS
    penalty = max(0, (attempts - 1) * ATTEMPT_PENALTY)
    return max(base - penalty, MINIMUM_PUZZLE_SCORE)
