"""Game state layout: defaults, room order and puzzle results."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple

from aivault.core.types import RoomId

ROOM_ORDER: Tuple[RoomId, ...] = ("space", "food", "ethics", "green", "cyber")
DEFAULT_HINT_BUDGET = 10
CREDENTIAL_PATHS: Tuple[str, ...] = ("settings.apiKey",)


def default_state() -> Dict[str, Any]:
    """Return a fresh default game state tree."""
    return {
        "currentScreen": "title",
        "currentRoom": None,
        "currentPuzzleIndex": 0,
        "rooms": {
            room_id: {
                "unlocked": index == 0,
                "completed": False,
                "artifact": None,
                "puzzles": {},
            }
            for index, room_id in enumerate(ROOM_ORDER)
        },
        "timer": {"elapsed": 0, "running": False, "roomTimes": {}},
        "hints": {"total": DEFAULT_HINT_BUDGET, "used": 0},
        "score": {"points": 0, "accuracy": {}},
        "badges": [],
        "settings": {
            "aiProvider": None,
            "apiKey": None,
            "soundEnabled": True,
            "musicEnabled": False,
        },
        "metaPuzzleUnlocked": False,
        "gameComplete": False,
        "startTime": None,
        "endTime": None,
    }


def next_room(room_id: str) -> str | None:
    """Return the room unlocked by completing ``room_id``, if any."""
    try:
        index = ROOM_ORDER.index(room_id)  # type: ignore[arg-type]
    except ValueError:
        return None
    if index + 1 >= len(ROOM_ORDER):
        return None
    return ROOM_ORDER[index + 1]


@dataclass(frozen=True, slots=True)
class PuzzleResult:
    """Outcome recorded once when a puzzle is solved."""

    attempts: int
    time: int
    score: int
    solved: bool = True

    @property
    def first_attempt(self) -> bool:
        return self.attempts == 1

    def to_payload(self) -> Dict[str, Any]:
        return {
            "solved": self.solved,
            "attempts": self.attempts,
            "time": self.time,
            "score": self.score,
            "firstAttempt": self.first_attempt,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PuzzleResult":
        return cls(
            attempts=int(payload.get("attempts", 1)),
            time=int(payload.get("time", 0)),
            score=int(payload.get("score", 0)),
            solved=bool(payload.get("solved", False)),
        )
