from __future__ import annotations

from pathlib import Path

import pytest

from aivault.data import paths
from aivault.data.json_loader import load_json
from aivault.data.repositories import (
    BadgesRepository,
    CharactersRepository,
    MetaPuzzleRepository,
    RoomsRepository,
)
from aivault.domain.state import ROOM_ORDER
from aivault.services import achievement_service
from aivault.services.meta_puzzle_service import check_meta_answer
from aivault.services.puzzle_registry import PuzzleRegistry
from tests.helpers.game_builders import CORRECT_ANSWERS, META_ANSWERS


@pytest.fixture(scope="module")
def definitions_dir() -> Path:
    """Return the canonical definitions directory."""
    return paths.get_definitions_path()


@pytest.fixture(scope="module")
def rooms_repo(definitions_dir: Path) -> RoomsRepository:
    return RoomsRepository(characters_repo=CharactersRepository(definitions_dir), base_path=definitions_dir)


@pytest.mark.parametrize("filename", ["rooms.json", "badges.json", "characters.json", "meta_puzzle.json"])
def test_definition_files_are_valid_json(definitions_dir: Path, filename: str) -> None:
    """Every definition file should be parsable JSON."""
    data = load_json(definitions_dir / filename)
    assert isinstance(data, dict), f"{filename} must contain an object; found {type(data).__name__}"


def test_every_room_is_defined_with_puzzles(rooms_repo: RoomsRepository) -> None:
    assert [room.room_id for room in rooms_repo.all()] == list(ROOM_ORDER)
    for room in rooms_repo.all():
        assert len(room.puzzles) == 3, room.room_id
        assert [puzzle.order for puzzle in room.puzzles] == sorted(puzzle.order for puzzle in room.puzzles)
        assert room.artifact.name and room.artifact.meta_clue


def test_every_puzzle_has_hints(rooms_repo: RoomsRepository) -> None:
    for room in rooms_repo.all():
        for puzzle in room.puzzles:
            assert puzzle.hints, puzzle.puzzle_id
            assert {hint.level for hint in puzzle.hints} <= {1, 2, 3}


def test_every_puzzle_is_solvable(rooms_repo: RoomsRepository) -> None:
    registry = PuzzleRegistry()
    puzzle_ids = set()
    for room in rooms_repo.all():
        for puzzle in room.puzzles:
            puzzle_ids.add(puzzle.puzzle_id)
            assert registry.check(puzzle, CORRECT_ANSWERS[puzzle.puzzle_id]).correct, puzzle.puzzle_id
    assert puzzle_ids == set(CORRECT_ANSWERS)


def test_rule_badges_exist_in_catalog(definitions_dir: Path) -> None:
    badges = BadgesRepository(definitions_dir)
    rule_badges = {
        achievement_service.SPEED_BADGE,
        achievement_service.NO_HINTS_BADGE,
        achievement_service.COMPLETION_BADGE,
        *achievement_service.PERFECTION_BADGES_ON_SOLVE.values(),
        *achievement_service.PERFECTION_BADGES_ON_COMPLETE.values(),
    }
    for badge_id in rule_badges:
        assert badges.has(badge_id), badge_id


def test_meta_puzzle_steps_are_answerable(definitions_dir: Path) -> None:
    steps = MetaPuzzleRepository(definitions_dir).definition().steps
    assert len(steps) == len(META_ANSWERS)
    for step, answer in zip(steps, META_ANSWERS):
        assert check_meta_answer(step, answer), step.instruction


def test_characters_have_core_dialogue(definitions_dir: Path) -> None:
    for character in CharactersRepository(definitions_dir).all():
        for mood in ("greeting", "success", "failure"):
            assert character.fallback_dialogue.get(mood), f"{character.character_id} {mood}"
