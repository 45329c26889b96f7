"""Final vault challenge unlocked once every room is complete."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List

from aivault.core.store import PathStore
from aivault.data.repositories import MetaPuzzleRepository
from aivault.domain.defs import ArtifactDef, MetaPuzzleDef, MetaStepDef
from aivault.domain.events import GAME_COMPLETED, GameCompletedEvent
from aivault.services.achievement_service import AchievementEngine
from aivault.services.answer_validator import to_number
from aivault.services.errors import ConfigurationError, RoomLockedError
from aivault.services.progression_service import collected_artifacts
from aivault.services.timer_service import GameTimer

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MetaStepResult:
    correct: bool
    step_index: int
    complete: bool = False


def check_meta_answer(step: MetaStepDef, answer: Any) -> bool:
    if step.input_type in ("slider", "number"):
        number = to_number(answer)
        expected = to_number(step.answer)
        if number is None or expected is None:
            return False
        if step.input_type == "slider":
            return abs(number - expected) <= step.tolerance
        return number == expected
    if answer is None:
        return False
    return str(answer).strip().lower() == str(step.answer).strip().lower()


class MetaPuzzleService:
    """Walks the player through the meta-puzzle steps in order."""

    def __init__(
        self,
        store: PathStore,
        *,
        meta_repo: MetaPuzzleRepository,
        achievements: AchievementEngine,
        timer: GameTimer,
    ) -> None:
        self._store = store
        self._meta_repo = meta_repo
        self._achievements = achievements
        self._timer = timer
        self._step_index = 0

    @property
    def definition(self) -> MetaPuzzleDef:
        return self._meta_repo.definition()

    @property
    def step_index(self) -> int:
        return self._step_index

    @property
    def total_steps(self) -> int:
        return len(self.definition.steps)

    @property
    def current_step(self) -> MetaStepDef | None:
        steps = self.definition.steps
        return steps[self._step_index] if self._step_index < len(steps) else None

    def is_unlocked(self) -> bool:
        return bool(self._store.get("metaPuzzleUnlocked"))

    def enter(self) -> MetaStepDef:
        self._require_unlocked()
        self._step_index = 0
        self._store.set("currentScreen", "meta")
        step = self.current_step
        if step is None:
            raise ConfigurationError("The vault has no steps configured.")
        return step

    def artifacts(self) -> List[ArtifactDef]:
        return collected_artifacts(self._store)

    def check_step(self, answer: Any) -> MetaStepResult:
        self._require_unlocked()
        step = self.current_step
        if step is None or self._store.get("gameComplete"):
            raise ConfigurationError("The vault is already open.")
        if not check_meta_answer(step, answer):
            return MetaStepResult(correct=False, step_index=self._step_index)
        solved_index = self._step_index
        self._step_index += 1
        if self._step_index < self.total_steps:
            return MetaStepResult(correct=True, step_index=solved_index)
        self._complete_game()
        return MetaStepResult(correct=True, step_index=solved_index, complete=True)

    def _require_unlocked(self) -> None:
        if not self.is_unlocked():
            raise RoomLockedError("The vault stays sealed until every room is complete.")

    def _complete_game(self) -> None:
        self._store.set("gameComplete", True)
        self._timer.stop()
        self._achievements.check_end_game_badges()
        points = self._store.get("score.points") or 0
        elapsed = self._store.get("timer.elapsed") or 0
        logger.info("Vault opened with %d points in %ds", points, elapsed)
        self._store.emit(GAME_COMPLETED, GameCompletedEvent(points=points, elapsed=elapsed))
