"""Repository for rooms and their ordered puzzles."""
from __future__ import annotations

from typing import Dict, List, Tuple

from aivault.data.errors import DataReferenceError, DataValidationError
from aivault.data.repositories.base import RepositoryBase
from aivault.data.repositories.characters_repo import DEFAULT_CHARACTER_ID, CharactersRepository
from aivault.domain.defs import (
    DEFAULT_FAILURE_FEEDBACK,
    DEFAULT_SUCCESS_FEEDBACK,
    GOAL_SOLUTION_KIND,
    SOLUTION_KINDS,
    ArtifactDef,
    HintDef,
    PuzzleDef,
    PuzzleFeedbackDef,
    PuzzleKind,
    RoomDef,
    SolutionDef,
)
from aivault.domain.state import ROOM_ORDER

# Fields each solution kind must declare, with the JSON type they must have.
_SOLUTION_FIELDS: Dict[str, Tuple[Tuple[str, type | Tuple[type, ...]], ...]] = {
    "exact": (("value", (str, int, float)),),
    "number": (("value", (int, float, str)),),
    "range": (("min", (int, float)), ("max", (int, float))),
    "order": (("value", list),),
    "multi-value": (("values", list),),
    "blanks": (("values", dict),),
    "multi-choice": (("values", list),),
    "grid": (("grid", list),),
}


class RoomsRepository(RepositoryBase[RoomDef]):
    """Loads rooms, resolving puzzle kinds and solution specs up front."""

    def __init__(
        self,
        *,
        characters_repo: CharactersRepository | None = None,
        base_path=None,
    ) -> None:
        super().__init__("rooms.json", base_path)
        self._characters_repo = characters_repo

    def puzzles_for_room(self, room_id: str) -> Tuple[PuzzleDef, ...]:
        return self.get(room_id).puzzles

    def get_puzzle(self, room_id: str, puzzle_id: str) -> PuzzleDef:
        room = self.get(room_id)
        return room.puzzles[room.puzzle_index(puzzle_id)]

    def total_puzzles(self) -> int:
        return sum(len(room.puzzles) for room in self.all())

    def _build(self, raw: dict[str, object]) -> Dict[str, RoomDef]:
        rooms_raw = self._require_list(raw.get("rooms"), "rooms.json.rooms")
        parsed: Dict[str, RoomDef] = {}
        seen_puzzles: set[str] = set()
        for index, entry in enumerate(rooms_raw):
            mapping = self._require_mapping(entry, f"rooms[{index}]")
            room_id = self._require_str(mapping.get("id"), f"rooms[{index}].id")
            if room_id not in ROOM_ORDER:
                raise DataValidationError(
                    f"room '{room_id}' is not one of {', '.join(ROOM_ORDER)}."
                )
            if room_id in parsed:
                raise DataValidationError(f"Duplicate room id '{room_id}'.")
            parsed[room_id] = self._parse_room(room_id, mapping, seen_puzzles)
        # Catalog order follows the fixed unlock order, whatever the file order.
        return {room_id: parsed[room_id] for room_id in ROOM_ORDER if room_id in parsed}

    def _parse_room(self, room_id: str, mapping: dict[str, object], seen_puzzles: set[str]) -> RoomDef:
        ctx = f"room '{room_id}'"
        character = mapping.get("character", DEFAULT_CHARACTER_ID)
        character = self._require_str(character, f"{ctx} character")
        self._validate_character(character, ctx)
        artifact_map = self._require_mapping(mapping.get("artifact"), f"{ctx} artifact")
        artifact = ArtifactDef(
            name=self._require_str(artifact_map.get("name"), f"{ctx} artifact.name"),
            meta_clue=self._require_str(artifact_map.get("metaClue"), f"{ctx} artifact.metaClue"),
        )
        puzzles_raw = self._require_list(mapping.get("puzzles"), f"{ctx} puzzles")
        puzzles: List[PuzzleDef] = []
        for index, entry in enumerate(puzzles_raw):
            puzzle = self._parse_puzzle(entry, f"{ctx} puzzles[{index}]", character)
            if puzzle.puzzle_id in seen_puzzles:
                raise DataValidationError(f"Duplicate puzzle id '{puzzle.puzzle_id}'.")
            seen_puzzles.add(puzzle.puzzle_id)
            puzzles.append(puzzle)
        orders = [puzzle.order for puzzle in puzzles]
        if len(set(orders)) != len(orders):
            raise DataValidationError(f"{ctx} puzzles must have distinct 'order' values.")
        return RoomDef(
            room_id=room_id,
            name=str(mapping.get("name") or room_id),
            intro_narration=str(mapping.get("introNarration") or ""),
            character=character,
            artifact=artifact,
            puzzles=tuple(sorted(puzzles, key=lambda puzzle: puzzle.order)),
        )

    def _parse_puzzle(self, entry: object, ctx: str, room_character: str) -> PuzzleDef:
        mapping = self._require_mapping(entry, ctx)
        puzzle_id = self._require_str(mapping.get("id"), f"{ctx}.id")
        ctx = f"puzzle '{puzzle_id}'"
        kind_raw = self._require_str(mapping.get("type"), f"{ctx} type")
        try:
            kind = PuzzleKind(kind_raw)
        except ValueError as exc:
            raise DataValidationError(f"{ctx} has unknown puzzle type '{kind_raw}'.") from exc
        config = self._require_mapping(mapping.get("config", {}), f"{ctx} config")
        character = mapping.get("character", room_character)
        character = self._require_str(character, f"{ctx} character")
        self._validate_character(character, ctx)
        feedback_map = self._require_mapping(mapping.get("feedback", {}), f"{ctx} feedback")
        feedback = PuzzleFeedbackDef(
            success=str(feedback_map.get("success") or DEFAULT_SUCCESS_FEEDBACK),
            failure=str(feedback_map.get("failure") or DEFAULT_FAILURE_FEEDBACK),
        )
        return PuzzleDef(
            puzzle_id=puzzle_id,
            kind=kind,
            title=self._require_str(mapping.get("title"), f"{ctx} title"),
            description=str(mapping.get("description") or ""),
            order=self._require_int(mapping.get("order"), f"{ctx} order"),
            difficulty=self._require_int(mapping.get("difficulty", 1), f"{ctx} difficulty", minimum=1, maximum=3),
            points=self._require_int(mapping.get("points", 100), f"{ctx} points", minimum=0),
            solution=self._parse_solution(mapping.get("solution"), kind, config, ctx),
            hints=self._parse_hints(mapping.get("hints", []), ctx),
            character=character,
            feedback=feedback,
            config=config,
        )

    def _parse_solution(
        self, value: object, kind: PuzzleKind, config: dict[str, object], ctx: str
    ) -> SolutionDef:
        if kind is PuzzleKind.PROMPT and value is None:
            goal = self._require_str(config.get("goal"), f"{ctx} config.goal")
            return SolutionDef(kind=GOAL_SOLUTION_KIND, params={"goal": goal})
        mapping = self._require_mapping(value, f"{ctx} solution")
        solution_kind = self._require_str(mapping.get("type"), f"{ctx} solution.type")
        if solution_kind not in SOLUTION_KINDS:
            raise DataValidationError(f"{ctx} has unknown solution type '{solution_kind}'.")
        for field_name, expected in _SOLUTION_FIELDS[solution_kind]:
            field_value = mapping.get(field_name)
            if isinstance(field_value, bool) or not isinstance(field_value, expected):
                raise DataValidationError(
                    f"{ctx} solution.{field_name} is missing or has the wrong type for '{solution_kind}'."
                )
        if solution_kind == "range" and mapping["min"] > mapping["max"]:  # type: ignore[operator]
            raise DataValidationError(f"{ctx} solution.min must not exceed solution.max.")
        params = {key: item for key, item in mapping.items() if key != "type"}
        return SolutionDef(kind=solution_kind, params=params)

    def _parse_hints(self, value: object, ctx: str) -> Tuple[HintDef, ...]:
        hints: List[HintDef] = []
        for index, entry in enumerate(self._require_list(value, f"{ctx} hints")):
            hint_map = self._require_mapping(entry, f"{ctx} hints[{index}]")
            hints.append(
                HintDef(
                    level=self._require_int(hint_map.get("level"), f"{ctx} hints[{index}].level", minimum=1, maximum=3),
                    text=self._require_str(hint_map.get("text"), f"{ctx} hints[{index}].text"),
                )
            )
        return tuple(hints)

    def _validate_character(self, character_id: str, context: str) -> None:
        if self._characters_repo is None:
            return
        if not self._characters_repo.has(character_id):
            raise DataReferenceError(f"{context} references unknown character '{character_id}'.")
