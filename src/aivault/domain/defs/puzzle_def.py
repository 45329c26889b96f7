"""Puzzle definition data structures."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Tuple

SOLUTION_KINDS: Tuple[str, ...] = (
    "exact",
    "number",
    "range",
    "order",
    "multi-value",
    "blanks",
    "multi-choice",
    "grid",
)
# Prompt puzzles are judged against a goal description instead of a fixed answer.
GOAL_SOLUTION_KIND = "goal"
DEFAULT_SUCCESS_FEEDBACK = "Correct!"
DEFAULT_FAILURE_FEEDBACK = "Not quite right. Try again!"


class PuzzleKind(str, Enum):
    """Closed set of puzzle types a catalog may reference."""

    FLOWCHART = "flowchart"
    PATTERN = "pattern"
    CODE_LOCK = "code-lock"
    DASHBOARD = "dashboard"
    OPTIMIZATION = "optimization"
    RECOMMENDATION = "recommendation"
    DECISION_TREE = "decision-tree"
    BIAS_DETECTION = "bias-detection"
    CROSSWORD = "crossword"
    SIMULATION = "simulation"
    CAUSE_EFFECT = "cause-effect"
    RESOURCE = "resource"
    DEBUG = "debug"
    PASSWORD = "password"
    PROMPT = "prompt"


@dataclass(frozen=True, slots=True)
class HintDef:
    level: int
    text: str


@dataclass(frozen=True, slots=True)
class SolutionDef:
    """Catalog-declared description of a correct answer."""

    kind: str
    params: Mapping[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.params.get(key, default)


@dataclass(frozen=True, slots=True)
class PuzzleFeedbackDef:
    success: str = DEFAULT_SUCCESS_FEEDBACK
    failure: str = DEFAULT_FAILURE_FEEDBACK


@dataclass(frozen=True, slots=True)
class PuzzleDef:
    puzzle_id: str
    kind: PuzzleKind
    title: str
    description: str
    order: int
    difficulty: int
    points: int
    solution: SolutionDef
    hints: Tuple[HintDef, ...]
    character: str
    feedback: PuzzleFeedbackDef = field(default_factory=PuzzleFeedbackDef)
    config: Mapping[str, Any] = field(default_factory=dict)
