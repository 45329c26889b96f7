"""Registry mapping each puzzle kind to its answer check and text input format."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from aivault.domain.defs import GOAL_SOLUTION_KIND, PuzzleDef, PuzzleKind
from aivault.services import answer_validator
from aivault.services.ai_client import PromptEvaluationService


@dataclass(slots=True)
class CheckOutcome:
    """Result of checking one submission."""

    correct: bool
    detail: Dict[str, bool] = field(default_factory=dict)
    feedback: str | None = None
    ai_response: str | None = None


PuzzleCheck = Callable[[PuzzleDef, Any], CheckOutcome]

_KIND_LABELS: Dict[PuzzleKind, str] = {
    PuzzleKind.FLOWCHART: "Flowchart",
    PuzzleKind.PATTERN: "Pattern",
    PuzzleKind.CODE_LOCK: "Code Lock",
    PuzzleKind.DASHBOARD: "Dashboard",
    PuzzleKind.OPTIMIZATION: "Optimization",
    PuzzleKind.RECOMMENDATION: "Recommendation",
    PuzzleKind.DECISION_TREE: "Decision Tree",
    PuzzleKind.BIAS_DETECTION: "Bias Detection",
    PuzzleKind.CROSSWORD: "Crossword",
    PuzzleKind.SIMULATION: "Simulation",
    PuzzleKind.CAUSE_EFFECT: "Cause & Effect",
    PuzzleKind.RESOURCE: "Resource Allocation",
    PuzzleKind.DEBUG: "Debug",
    PuzzleKind.PASSWORD: "Password",
    PuzzleKind.PROMPT: "Prompt Engineering",
}

_ANSWER_FORMATS: Dict[str, str] = {
    "exact": "a word or phrase",
    "number": "a number",
    "range": "a number",
    "order": "items in order, separated by commas",
    "multi-value": "numbers separated by commas",
    "blanks": "key=value pairs separated by commas",
    "multi-choice": "your choices separated by commas",
    "grid": "rows separated by ';', cells by ','",
    GOAL_SOLUTION_KIND: "a prompt for the AI",
}


@dataclass(frozen=True, slots=True)
class PuzzleKindSpec:
    kind: PuzzleKind
    label: str
    check: PuzzleCheck


def _split_list(text: str, separator: str = ",") -> List[str]:
    return [part.strip() for part in text.split(separator) if part.strip()]


def parse_text_answer(solution_kind: str, text: str) -> Any:
    """Convert console input into the answer shape ``solution_kind`` expects."""
    if solution_kind in ("order", "multi-value", "multi-choice"):
        return _split_list(text)
    if solution_kind == "blanks":
        answer: Dict[str, str] = {}
        for pair in _split_list(text):
            key, sep, value = pair.partition("=")
            if sep:
                answer[key.strip()] = value.strip()
        return answer
    if solution_kind == "grid":
        return [_split_list(row) for row in _split_list(text, ";")]
    return text.strip()


class PuzzleRegistry:
    """Resolves a puzzle's kind to the check used when its answer is submitted."""

    def __init__(self, prompt_evaluator: PromptEvaluationService | None = None) -> None:
        self._prompt_evaluator = prompt_evaluator or PromptEvaluationService()
        self._specs: Dict[PuzzleKind, PuzzleKindSpec] = {
            kind: PuzzleKindSpec(kind=kind, label=label, check=self._check_solution)
            for kind, label in _KIND_LABELS.items()
        }
        self._specs[PuzzleKind.PROMPT] = PuzzleKindSpec(
            kind=PuzzleKind.PROMPT,
            label=_KIND_LABELS[PuzzleKind.PROMPT],
            check=self._check_prompt,
        )

    def spec_for(self, kind: PuzzleKind) -> PuzzleKindSpec:
        return self._specs[kind]

    def kinds(self) -> List[PuzzleKind]:
        return list(self._specs)

    def check(self, puzzle: PuzzleDef, answer: Any) -> CheckOutcome:
        return self._specs[puzzle.kind].check(puzzle, answer)

    def answer_format(self, puzzle: PuzzleDef) -> str:
        return _ANSWER_FORMATS.get(puzzle.solution.kind, "your answer")

    def parse_answer(self, puzzle: PuzzleDef, text: str) -> Any:
        return parse_text_answer(puzzle.solution.kind, text)

    @staticmethod
    def _check_solution(puzzle: PuzzleDef, answer: Any) -> CheckOutcome:
        correct = answer_validator.validate(puzzle.solution, answer)
        detail = answer_validator.validate_breakdown(puzzle.solution, answer)
        return CheckOutcome(
            correct=correct,
            detail=detail,
            feedback=puzzle.feedback.success if correct else puzzle.feedback.failure,
        )

    def _check_prompt(self, puzzle: PuzzleDef, answer: Any) -> CheckOutcome:
        if puzzle.solution.kind != GOAL_SOLUTION_KIND:
            return self._check_solution(puzzle, answer)
        goal_config = dict(puzzle.config)
        goal_config.setdefault("goal", puzzle.solution.get("goal", ""))
        evaluation = self._prompt_evaluator.evaluate(str(answer or ""), goal_config)
        return CheckOutcome(
            correct=evaluation.meets_goal,
            detail={"answer": evaluation.meets_goal},
            feedback=evaluation.feedback,
            ai_response=evaluation.ai_response,
        )
