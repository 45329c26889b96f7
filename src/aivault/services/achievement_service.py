"""Badge rules evaluated against the state tree when game events fire."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping

from aivault.core.store import PathStore
from aivault.data.repositories import BadgesRepository, RoomsRepository
from aivault.domain.defs import BadgeDef
from aivault.domain.events import (
    BADGE_EARNED,
    PUZZLE_SOLVED,
    ROOM_COMPLETED,
    BadgeEarnedEvent,
    PuzzleSolvedEvent,
    RoomCompletedEvent,
)

logger = logging.getLogger(__name__)

SPEED_BADGE = "speed-demon"
NO_HINTS_BADGE = "no-hints"
COMPLETION_BADGE = "vault-master"
SPEED_LIMIT_SECONDS = 300

# Rooms whose badge requires every puzzle solved on the first attempt.
PERFECTION_BADGES_ON_SOLVE: Dict[str, str] = {"space": "perfect-logic"}
PERFECTION_BADGES_ON_COMPLETE: Dict[str, str] = {"food": "data-master", "cyber": "code-breaker"}


@dataclass(frozen=True, slots=True)
class BadgeStatus:
    definition: BadgeDef
    earned: bool


class AchievementEngine:
    """
    Awards badges in reaction to ``puzzleSolved`` and ``roomCompleted``.

    Rules only read the current state, so running them again is harmless:
    awarding is a set insert and an already earned badge is never re-emitted.
    End-of-game rules run from :meth:`check_end_game_badges` only.
    """

    def __init__(
        self,
        store: PathStore,
        *,
        rooms_repo: RoomsRepository,
        badges_repo: BadgesRepository,
    ) -> None:
        self._store = store
        self._rooms_repo = rooms_repo
        self._badges_repo = badges_repo
        self._unsubscribers: List[Callable[[], None]] = [
            store.subscribe(PUZZLE_SOLVED, self._on_puzzle_solved),
            store.subscribe(ROOM_COMPLETED, self._on_room_completed),
        ]

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def earned(self) -> List[str]:
        return list(self._store.get("badges") or [])

    def has_badge(self, badge_id: str) -> bool:
        return badge_id in self.earned()

    def award(self, badge_id: str) -> bool:
        """Add ``badge_id`` unless already earned; return True if it was new."""
        badges = self.earned()
        if badge_id in badges:
            return False
        self._store.set("badges", [*badges, badge_id])
        logger.info("Badge earned: %s", badge_id)
        self._store.emit(BADGE_EARNED, BadgeEarnedEvent(badge_id=badge_id))
        return True

    def check_end_game_badges(self) -> List[str]:
        """Run the end-of-game rules; return the badges newly awarded."""
        awarded: List[str] = []
        if (self._store.get("hints.used") or 0) == 0 and self.award(NO_HINTS_BADGE):
            awarded.append(NO_HINTS_BADGE)
        if self.award(COMPLETION_BADGE):
            awarded.append(COMPLETION_BADGE)
        return awarded

    def all_badges(self) -> List[BadgeStatus]:
        earned = set(self.earned())
        return [BadgeStatus(definition=badge, earned=badge.badge_id in earned) for badge in self._badges_repo.all()]

    def earned_badges(self) -> List[BadgeDef]:
        return [status.definition for status in self.all_badges() if status.earned]

    def is_room_perfect(self, room_id: str) -> bool:
        """All of the room's puzzles are recorded and each was solved first try."""
        results = self._store.get(f"rooms.{room_id}.puzzles")
        if not isinstance(results, Mapping):
            return False
        recorded = [result for result in results.values() if isinstance(result, Mapping) and result.get("solved")]
        required = len(self._rooms_repo.puzzles_for_room(room_id)) if self._rooms_repo.has(room_id) else 0
        if required == 0 or len(recorded) < required:
            return False
        return all(result.get("firstAttempt") for result in recorded)

    def is_speed_run(self, room_id: str) -> bool:
        entry = self._store.get(f"timer.roomTimes.{room_id}")
        if not isinstance(entry, Mapping) or entry.get("end") is None:
            return False
        return entry["end"] - entry.get("start", 0) < SPEED_LIMIT_SECONDS

    def _on_puzzle_solved(self, event: PuzzleSolvedEvent) -> None:
        badge_id = PERFECTION_BADGES_ON_SOLVE.get(event.room_id)
        if badge_id and self.is_room_perfect(event.room_id):
            self.award(badge_id)

    def _on_room_completed(self, event: RoomCompletedEvent) -> None:
        if self.is_speed_run(event.room_id):
            self.award(SPEED_BADGE)
        badge_id = PERFECTION_BADGES_ON_COMPLETE.get(event.room_id)
        if badge_id and self.is_room_perfect(event.room_id):
            self.award(badge_id)
