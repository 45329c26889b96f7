from __future__ import annotations

from typing import Any, List, Mapping

from aivault.domain.events import HINT_USED
from aivault.services.ai_client import AIProviderClient, Hint
from aivault.services.errors import RemoteServiceError
from aivault.services.hint_service import ENCOURAGEMENT, HintPolicy, fallback_hint, hint_level
from tests.helpers.game_builders import CORRECT_ANSWERS, FakeClock, build_engine_stack

_HINTS = [{"level": 1, "text": "first"}, {"level": 2, "text": "second"}]


class _ScriptedClient(AIProviderClient):
    """Client that answers hints from a script instead of the network."""

    def __init__(self, *, fail: bool = False) -> None:
        super().__init__()
        self.configure("sk-test", "openai")
        self.calls: List[int] = []
        self._fail = fail

    def get_hint(self, context: Mapping[str, Any], level: int, character_id: str) -> Hint:
        self.calls.append(level)
        if self._fail:
            raise RemoteServiceError("provider unavailable")
        return Hint(source="ai", text=f"remote level {level}")


def test_hint_level_grows_with_attempts_and_caps() -> None:
    assert [hint_level(n) for n in (0, 1, 2, 5, -3)] == [1, 2, 3, 3, 1]


def test_fallback_hint_selection() -> None:
    assert fallback_hint(_HINTS, 2).text == "second"
    assert fallback_hint(_HINTS, 3).text == "second"
    assert fallback_hint([], 1) == Hint(source="fallback", text=ENCOURAGEMENT)


def test_hint_budget_is_enforced() -> None:
    stack = build_engine_stack()
    events: List[Any] = []
    stack.store.subscribe(HINT_USED, events.append)

    results = [stack.hints.use_hint() for _ in range(11)]

    assert results == [True] * 10 + [False]
    assert stack.store.get("hints.used") == 10
    assert stack.hints.hints_remaining() == 0
    assert len(events) == 10
    assert events[-1].remaining == 0


def test_unconfigured_policy_uses_authored_hints() -> None:
    policy = HintPolicy(build_engine_stack().store)
    hint = policy.request_hint({"hints": _HINTS}, 1, "mentor")
    assert hint == Hint(source="fallback", text="second")


def test_remote_calls_are_rate_limited() -> None:
    clock = FakeClock()
    client = _ScriptedClient()
    policy = HintPolicy(build_engine_stack().store, client=client, clock=clock)

    first = policy.request_hint({"hints": _HINTS}, 0, "mentor")
    clock.advance(4.0)
    second = policy.request_hint({"hints": _HINTS}, 0, "mentor")
    clock.advance(2.0)
    third = policy.request_hint({"hints": _HINTS}, 0, "mentor")

    assert first.source == "ai"
    assert second == Hint(source="fallback", text="first")
    assert third.source == "ai"
    assert client.calls == [1, 1]


def test_remote_failure_falls_back_and_still_counts_as_a_call() -> None:
    clock = FakeClock()
    client = _ScriptedClient(fail=True)
    policy = HintPolicy(build_engine_stack().store, client=client, clock=clock)

    assert policy.request_hint({"hints": _HINTS}, 0, "mentor").source == "fallback"
    assert policy.request_hint({"hints": _HINTS}, 0, "mentor").source == "fallback"
    assert client.calls == [1]


def test_request_hint_for_active_puzzle_spends_budget() -> None:
    stack = build_engine_stack()
    puzzle = stack.progression.enter_room("space").puzzle
    assert puzzle is not None
    stack.progression.submit_answer(puzzle, ["wrong"])

    hint = stack.hints.request_hint_for(stack.progression)

    assert hint is not None
    assert hint.source == "fallback"
    assert stack.store.get("hints.used") == 1


def test_request_hint_for_without_puzzle_or_budget() -> None:
    stack = build_engine_stack()
    assert stack.hints.request_hint_for(stack.progression) is None
    assert stack.store.get("hints.used") == 0

    stack.progression.enter_room("space")
    stack.store.set("hints.used", 10)
    assert stack.hints.request_hint_for(stack.progression) is None


def test_hint_arriving_after_the_puzzle_changed_is_discarded() -> None:
    stack = build_engine_stack()
    puzzle = stack.progression.enter_room("space").puzzle
    assert puzzle is not None

    class _AdvancingClient(_ScriptedClient):
        def get_hint(self, context: Mapping[str, Any], level: int, character_id: str) -> Hint:
            stack.progression.submit_answer(puzzle, CORRECT_ANSWERS[puzzle.puzzle_id])
            return super().get_hint(context, level, character_id)

    policy = HintPolicy(stack.store, client=_AdvancingClient(), clock=stack.clock)
    assert policy.request_hint_for(stack.progression) is None
    assert stack.progression.current_puzzle is not None
    assert stack.progression.current_puzzle.puzzle_id == "space-pattern"
