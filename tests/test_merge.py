from __future__ import annotations

import copy

from aivault.domain.merge import deep_merge
from aivault.domain.state import default_state


def _saved_snapshot() -> dict:
    return {
        "currentScreen": "room-select",
        "rooms": {"space": {"completed": True, "puzzles": {"space-flowchart": {"solved": True, "attempts": 1}}}},
        "badges": ["perfect-logic"],
        "score": {"points": 300},
    }


def test_merge_keeps_defaults_for_missing_keys() -> None:
    merged = deep_merge(default_state(), _saved_snapshot())
    assert merged["rooms"]["space"]["completed"] is True
    assert merged["rooms"]["space"]["unlocked"] is True
    assert merged["rooms"]["food"] == default_state()["rooms"]["food"]
    assert merged["score"] == {"points": 300, "accuracy": {}}
    assert merged["hints"] == {"total": 10, "used": 0}


def test_merge_is_idempotent() -> None:
    once = deep_merge(default_state(), _saved_snapshot())
    twice = deep_merge(once, _saved_snapshot())
    assert twice == once


def test_lists_replace_instead_of_merging() -> None:
    merged = deep_merge({"badges": ["a", "b", "c"]}, {"badges": ["z"]})
    assert merged["badges"] == ["z"]


def test_null_and_scalars_replace_mappings() -> None:
    merged = deep_merge({"settings": {"apiKey": "x"}, "currentRoom": {"id": 1}}, {"currentRoom": None})
    assert merged["currentRoom"] is None
    assert merged["settings"] == {"apiKey": "x"}


def test_mapping_replaces_scalar_target() -> None:
    merged = deep_merge({"timer": 5}, {"timer": {"elapsed": 3}})
    assert merged["timer"] == {"elapsed": 3}


def test_inputs_are_not_mutated() -> None:
    target = default_state()
    source = _saved_snapshot()
    target_copy = copy.deepcopy(target)
    source_copy = copy.deepcopy(source)
    deep_merge(target, source)
    assert target == target_copy
    assert source == source_copy


def test_save_missing_badges_keeps_default_list() -> None:
    saved = _saved_snapshot()
    del saved["badges"]
    merged = deep_merge(default_state(), saved)
    assert merged["badges"] == []
