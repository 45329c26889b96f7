"""Room definition data structures."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple

from .puzzle_def import PuzzleDef


@dataclass(frozen=True, slots=True)
class ArtifactDef:
    name: str
    meta_clue: str

    def to_payload(self) -> Dict[str, Any]:
        return {"name": self.name, "metaClue": self.meta_clue}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> "ArtifactDef":
        payload = payload or {}
        return cls(name=str(payload.get("name") or "Unknown Artifact"), meta_clue=str(payload.get("metaClue") or ""))


@dataclass(frozen=True, slots=True)
class RoomDef:
    room_id: str
    name: str
    intro_narration: str
    character: str
    artifact: ArtifactDef
    puzzles: Tuple[PuzzleDef, ...]

    def puzzle_index(self, puzzle_id: str) -> int:
        for index, puzzle in enumerate(self.puzzles):
            if puzzle.puzzle_id == puzzle_id:
                return index
        raise KeyError(puzzle_id)
