from __future__ import annotations

import logging

import pytest

from aivault.core.store import (
    STATE_CHANGE,
    BranchChangedEvent,
    PathChangedEvent,
    PathStore,
    StateChangedEvent,
    change_event,
)
from aivault.domain.state import default_state


def _build_store() -> PathStore:
    return PathStore(default_state())


@pytest.mark.parametrize(
    "path, value",
    [
        ("currentRoom", "space"),
        ("rooms.food.unlocked", True),
        ("timer.roomTimes.space", {"start": 0, "end": None}),
        ("brand.new.branch", [1, 2, 3]),
        ("score.points", 0),
    ],
)
def test_set_then_get_returns_value(path: str, value: object) -> None:
    store = _build_store()
    store.set(path, value)
    assert store.get(path) is value


def test_get_missing_segment_returns_none() -> None:
    store = _build_store()
    assert store.get("rooms.atlantis.unlocked") is None
    assert store.get("currentRoom.name") is None


def test_get_empty_path_returns_root() -> None:
    store = _build_store()
    assert store.get("") is store.tree


def test_get_indexes_into_lists() -> None:
    store = _build_store()
    store.set("badges", ["speed-demon", "no-hints"])
    assert store.get("badges.1") == "no-hints"
    assert store.get("badges.5") is None


def test_set_replaces_scalar_intermediate_with_mapping() -> None:
    store = _build_store()
    store.set("currentRoom", "space")
    store.set("currentRoom.detail", 1)
    assert store.get("currentRoom") == {"detail": 1}


def test_set_empty_path_raises() -> None:
    with pytest.raises(ValueError):
        _build_store().set("", 1)


def test_set_emits_events_in_order() -> None:
    store = _build_store()
    received: list[tuple[str, object]] = []
    store.subscribe(STATE_CHANGE, lambda event: received.append((STATE_CHANGE, event)))
    store.subscribe(change_event("rooms.food.unlocked"), lambda event: received.append(("exact", event)))
    store.subscribe(change_event("rooms"), lambda event: received.append(("branch", event)))

    store.set("rooms.food.unlocked", True)

    assert [name for name, _ in received] == [STATE_CHANGE, "exact", "branch"]
    assert received[0][1] == StateChangedEvent(path="rooms.food.unlocked", value=True, old_value=False)
    assert received[1][1] == PathChangedEvent(value=True, old_value=False)
    assert received[2][1] == BranchChangedEvent(path="rooms.food.unlocked", value=True)


def test_top_level_set_does_not_emit_branch_event() -> None:
    store = _build_store()
    branch_events: list[object] = []
    store.subscribe(change_event("currentRoom"), branch_events.append)
    store.set("currentRoom", "space")
    assert branch_events == [PathChangedEvent(value="space", old_value=None)]


def test_unsubscribe_callable_stops_delivery() -> None:
    store = _build_store()
    seen: list[object] = []
    unsubscribe = store.subscribe(STATE_CHANGE, seen.append)
    store.set("currentRoom", "space")
    unsubscribe()
    store.set("currentRoom", "food")
    assert len(seen) == 1
    assert store.listener_count(STATE_CHANGE) == 0


def test_failing_listener_is_isolated(caplog: pytest.LogCaptureFixture) -> None:
    store = _build_store()
    delivered: list[object] = []

    def _boom(_event: object) -> None:
        raise RuntimeError("listener failure")

    store.subscribe("custom", _boom)
    store.subscribe("custom", delivered.append)
    with caplog.at_level(logging.ERROR, logger="aivault.core.store"):
        store.emit("custom", "payload")

    assert delivered == ["payload"]
    assert "listener failure" in caplog.text


def test_handler_added_during_emit_runs_next_time_only() -> None:
    store = _build_store()
    calls: list[str] = []

    def _late(_event: object) -> None:
        calls.append("late")

    def _first(_event: object) -> None:
        calls.append("first")
        store.subscribe("tick", _late)

    store.subscribe("tick", _first)
    store.emit("tick")
    assert calls == ["first"]


def test_replace_swaps_tree_without_events() -> None:
    store = _build_store()
    seen: list[object] = []
    store.subscribe(STATE_CHANGE, seen.append)
    store.replace({"currentScreen": "end"})
    assert store.get("currentScreen") == "end"
    assert seen == []


def test_set_assigns_into_list_by_index() -> None:
    store = _build_store()
    store.set("badges", ["speed-demon", "no-hints"])
    seen: list[object] = []
    store.subscribe(change_event("badges.1"), seen.append)

    store.set("badges.1", "vault-master")

    assert store.get("badges") == ["speed-demon", "vault-master"]
    assert seen == [PathChangedEvent(value="vault-master", old_value="no-hints")]


def test_set_descends_through_list_elements() -> None:
    store = PathStore({"log": [{"room": "space"}]})
    store.set("log.0.room", "food")
    assert store.get("log") == [{"room": "food"}]


@pytest.mark.parametrize("path", ["badges.2", "badges.first", "badges.-1", "badges.5.name"])
def test_set_rejects_bad_list_index_without_touching_list(path: str) -> None:
    store = _build_store()
    store.set("badges", ["speed-demon", "no-hints"])
    with pytest.raises(ValueError):
        store.set(path, "vault-master")
    assert store.get("badges") == ["speed-demon", "no-hints"]
