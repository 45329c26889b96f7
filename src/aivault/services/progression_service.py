"""Room and puzzle progression: entry, submission, advancement and completion."""
from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from aivault.core.scheduling import ScheduledTask, Scheduler
from aivault.core.store import PathStore
from aivault.core.types import Clock
from aivault.data.repositories import RoomsRepository
from aivault.domain.defs import ArtifactDef, PuzzleDef, RoomDef
from aivault.domain.events import (
    ANSWER_REJECTED,
    PUZZLE_SOLVED,
    ROOM_COMPLETED,
    AnswerRejectedEvent,
    PuzzleSolvedEvent,
    RoomCompletedEvent,
)
from aivault.domain.scoring import calculate_score
from aivault.domain.state import ROOM_ORDER, PuzzleResult, next_room
from aivault.services.errors import ConfigurationError, RoomLockedError
from aivault.services.puzzle_registry import CheckOutcome, PuzzleRegistry
from aivault.services.timer_service import GameTimer

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RoomEntry:
    room: RoomDef
    cursor: int
    complete: bool
    puzzle: PuzzleDef | None = None


@dataclass(slots=True)
class SubmissionResult:
    correct: bool
    attempts: int
    outcome: CheckOutcome
    result: PuzzleResult | None = None
    room_completed: bool = False
    next_puzzle: PuzzleDef | None = None
    advance_pending: bool = False


@dataclass(frozen=True, slots=True)
class ProgressSummary:
    rooms_completed: int
    total_rooms: int
    puzzles_solved: int
    total_puzzles: int


@dataclass(slots=True)
class _ActivePuzzle:
    puzzle: PuzzleDef
    token: int
    started_at: float
    attempts: int = 0
    solved: bool = False
    pending_advance: ScheduledTask | None = field(default=None, repr=False)


class ProgressionEngine:
    """
    Drives one room at a time through its ordered puzzles.

    The cursor runs from 0 to N, where N means the room is complete. Attempts
    are counted in memory and only persisted with the result once the puzzle
    is solved. Every activated puzzle gets a fresh token so late results
    (hints, scheduled advances) can tell whether they still apply.
    """

    def __init__(
        self,
        store: PathStore,
        *,
        rooms_repo: RoomsRepository,
        registry: PuzzleRegistry,
        timer: GameTimer,
        scheduler: Scheduler,
        pacing_delay: float = 0.0,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._rooms_repo = rooms_repo
        self._registry = registry
        self._timer = timer
        self._scheduler = scheduler
        self._pacing_delay = pacing_delay
        self._clock = clock or time.monotonic
        self._tokens = itertools.count(1)
        self._room: RoomDef | None = None
        self._cursor = 0
        self._active: _ActivePuzzle | None = None

    # ---------------------------------------------------------------- Queries

    @property
    def current_room(self) -> RoomDef | None:
        return self._room

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current_puzzle(self) -> PuzzleDef | None:
        return self._active.puzzle if self._active else None

    @property
    def attempts(self) -> int:
        return self._active.attempts if self._active else 0

    @property
    def puzzle_token(self) -> int | None:
        return self._active.token if self._active else None

    def hint_context(self) -> Dict[str, Any]:
        """Describe the active puzzle for hint generation."""
        active = self._require_active()
        puzzle = active.puzzle
        return {
            "title": puzzle.title,
            "description": puzzle.description,
            "difficulty": puzzle.difficulty,
            "attempts": active.attempts,
            "hints": [{"level": hint.level, "text": hint.text} for hint in puzzle.hints],
        }

    def room_progress(self, room_id: str) -> int:
        results = self._room_results(room_id)
        return sum(1 for result in results.values() if isinstance(result, Mapping) and result.get("solved"))

    def overall_progress(self) -> ProgressSummary:
        rooms = self._rooms_repo.all()
        return ProgressSummary(
            rooms_completed=sum(1 for room_id in ROOM_ORDER if self._store.get(f"rooms.{room_id}.completed")),
            total_rooms=len(ROOM_ORDER),
            puzzles_solved=sum(self.room_progress(room.room_id) for room in rooms),
            total_puzzles=sum(len(room.puzzles) for room in rooms),
        )

    def resume_cursor(self, room: RoomDef) -> int:
        """Index of the first unsolved puzzle in the contiguous solved prefix."""
        results = self._room_results(room.room_id)
        for index, puzzle in enumerate(room.puzzles):
            result = results.get(puzzle.puzzle_id)
            if not (isinstance(result, Mapping) and result.get("solved")):
                return index
        return len(room.puzzles)

    # ------------------------------------------------------------ Transitions

    def enter_room(self, room_id: str) -> RoomEntry:
        room = self._resolve_room(room_id)
        if not self._store.get(f"rooms.{room_id}.unlocked"):
            raise RoomLockedError(f"Room '{room_id}' is locked.")
        self._detach()
        self._room = room
        self._cursor = self.resume_cursor(room)
        self._store.set("currentRoom", room_id)
        self._store.set("currentScreen", "room")
        self._store.set("currentPuzzleIndex", self._cursor)

        if self._cursor >= len(room.puzzles):
            if not self._store.get(f"rooms.{room_id}.completed"):
                # Every puzzle was recorded but completion never ran.
                self._complete_room(room)
            return RoomEntry(room=room, cursor=self._cursor, complete=True)

        self._timer.start_room_timer(room_id)
        puzzle = self._activate(self._cursor)
        logger.debug("Entered room %s at puzzle %d", room_id, self._cursor)
        return RoomEntry(room=room, cursor=self._cursor, complete=False, puzzle=puzzle)

    def submit_answer(self, puzzle: PuzzleDef, answer: Any) -> SubmissionResult:
        active = self._active
        if active is None or self._room is None or active.puzzle.puzzle_id != puzzle.puzzle_id:
            raise ConfigurationError(f"Puzzle '{puzzle.puzzle_id}' is not the active puzzle.")
        if active.solved:
            raise ConfigurationError(f"Puzzle '{puzzle.puzzle_id}' is already solved.")

        active.attempts += 1
        outcome = self._registry.check(puzzle, answer)
        room_id = self._room.room_id
        if not outcome.correct:
            self._store.emit(
                ANSWER_REJECTED,
                AnswerRejectedEvent(room_id=room_id, puzzle_id=puzzle.puzzle_id, attempts=active.attempts),
            )
            return SubmissionResult(correct=False, attempts=active.attempts, outcome=outcome)

        result = PuzzleResult(
            attempts=active.attempts,
            time=int(self._clock() - active.started_at),
            score=calculate_score(puzzle.points, active.attempts),
        )
        active.solved = True
        self._record_result(room_id, puzzle.puzzle_id, result)

        if self._pacing_delay > 0:
            token = active.token
            active.pending_advance = self._scheduler.call_later(
                self._pacing_delay, lambda: self._scheduled_advance(token)
            )
            return SubmissionResult(
                correct=True,
                attempts=result.attempts,
                outcome=outcome,
                result=result,
                advance_pending=True,
            )

        entry = self.advance()
        return SubmissionResult(
            correct=True,
            attempts=result.attempts,
            outcome=outcome,
            result=result,
            room_completed=entry.complete,
            next_puzzle=entry.puzzle,
        )

    def advance(self) -> RoomEntry:
        """Move past the solved active puzzle, completing the room after the last one."""
        active = self._require_active()
        if not active.solved:
            raise ConfigurationError(f"Puzzle '{active.puzzle.puzzle_id}' has not been solved yet.")
        room = self._require_room()
        self._detach()
        self._cursor += 1
        self._store.set("currentPuzzleIndex", self._cursor)
        if self._cursor < len(room.puzzles):
            puzzle = self._activate(self._cursor)
            return RoomEntry(room=room, cursor=self._cursor, complete=False, puzzle=puzzle)
        self._complete_room(room)
        return RoomEntry(room=room, cursor=self._cursor, complete=True)

    def exit_room(self) -> None:
        self.reset()
        self._store.set("currentRoom", None)
        self._store.set("currentScreen", "room-select")

    def reset(self) -> None:
        """Forget the active room without touching the state tree."""
        self._detach()
        self._room = None
        self._cursor = 0

    # -------------------------------------------------------------- Internals

    def _resolve_room(self, room_id: str) -> RoomDef:
        if not self._rooms_repo.has(room_id):
            raise ConfigurationError(f"Unknown room '{room_id}'.")
        if self._store.get(f"rooms.{room_id}") is None:
            raise ConfigurationError(f"Room '{room_id}' is missing from the game state.")
        room = self._rooms_repo.get(room_id)
        if not room.puzzles:
            raise ConfigurationError(f"Room '{room_id}' has no puzzles configured.")
        return room

    def _require_active(self) -> _ActivePuzzle:
        if self._active is None:
            raise ConfigurationError("No puzzle is active.")
        return self._active

    def _require_room(self) -> RoomDef:
        if self._room is None:
            raise ConfigurationError("No room is active.")
        return self._room

    def _activate(self, index: int) -> PuzzleDef:
        puzzle = self._require_room().puzzles[index]
        self._active = _ActivePuzzle(puzzle=puzzle, token=next(self._tokens), started_at=self._clock())
        return puzzle

    def _detach(self) -> None:
        active, self._active = self._active, None
        if active is not None and active.pending_advance is not None:
            active.pending_advance.cancel()

    def _scheduled_advance(self, token: int) -> None:
        if self.puzzle_token != token:
            logger.debug("Dropping stale advance for token %s", token)
            return
        self.advance()

    def _room_results(self, room_id: str) -> Mapping[str, Any]:
        results = self._store.get(f"rooms.{room_id}.puzzles")
        return results if isinstance(results, Mapping) else {}

    def _record_result(self, room_id: str, puzzle_id: str, result: PuzzleResult) -> None:
        self._store.set(f"rooms.{room_id}.puzzles.{puzzle_id}", result.to_payload())
        self._store.set("score.points", (self._store.get("score.points") or 0) + result.score)

        accuracy: Dict[str, Any] = dict(self._store.get("score.accuracy") or {})
        previous = accuracy.get(room_id) or {}
        accuracy[room_id] = {
            "solved": previous.get("solved", 0) + 1,
            "firstAttempt": previous.get("firstAttempt", 0) + (1 if result.first_attempt else 0),
        }
        self._store.set("score.accuracy", accuracy)

        self._store.emit(PUZZLE_SOLVED, PuzzleSolvedEvent(room_id=room_id, puzzle_id=puzzle_id, result=result))

    def _complete_room(self, room: RoomDef) -> None:
        room_id = room.room_id
        self._timer.stop_room_timer(room_id)
        self._store.set(f"rooms.{room_id}.completed", True)
        self._store.set(f"rooms.{room_id}.artifact", room.artifact.to_payload())
        unlocked = next_room(room_id)
        if unlocked is not None:
            self._store.set(f"rooms.{unlocked}.unlocked", True)
        all_complete = all(self._store.get(f"rooms.{rid}.completed") for rid in ROOM_ORDER)
        if bool(self._store.get("metaPuzzleUnlocked")) != all_complete:
            self._store.set("metaPuzzleUnlocked", all_complete)
        logger.info("Room %s completed", room_id)
        self._store.emit(ROOM_COMPLETED, RoomCompletedEvent(room_id=room_id, artifact=room.artifact))


def collected_artifacts(store: PathStore) -> List[ArtifactDef]:
    """Artifacts stored on completed rooms, in room order."""
    artifacts: List[ArtifactDef] = []
    for room_id in ROOM_ORDER:
        payload = store.get(f"rooms.{room_id}.artifact")
        if isinstance(payload, Mapping):
            artifacts.append(ArtifactDef.from_payload(payload))
    return artifacts
