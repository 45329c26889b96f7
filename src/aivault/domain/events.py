"""Domain events emitted on the state store alongside path changes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from aivault.domain.defs import ArtifactDef
from aivault.domain.state import PuzzleResult

PUZZLE_SOLVED = "puzzleSolved"
ANSWER_REJECTED = "answerRejected"
ROOM_COMPLETED = "roomCompleted"
BADGE_EARNED = "badgeEarned"
HINT_USED = "hintUsed"
GAME_COMPLETED = "gameCompleted"
STATE_LOADED = "stateLoaded"
STATE_RESET = "stateReset"


@dataclass(frozen=True, slots=True)
class PuzzleSolvedEvent:
    room_id: str
    puzzle_id: str
    result: PuzzleResult


@dataclass(frozen=True, slots=True)
class AnswerRejectedEvent:
    room_id: str
    puzzle_id: str
    attempts: int


@dataclass(frozen=True, slots=True)
class RoomCompletedEvent:
    room_id: str
    artifact: ArtifactDef


@dataclass(frozen=True, slots=True)
class BadgeEarnedEvent:
    badge_id: str


@dataclass(frozen=True, slots=True)
class HintUsedEvent:
    used: int
    remaining: int


@dataclass(frozen=True, slots=True)
class GameCompletedEvent:
    points: int
    elapsed: int


@dataclass(frozen=True, slots=True)
class StateSnapshotEvent:
    """Payload of ``stateLoaded`` and ``stateReset``."""

    state: Mapping[str, Any]
