"""Hint budget and the remote-or-fallback hint policy."""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Mapping, Sequence

from aivault.core.store import PathStore
from aivault.core.types import Clock
from aivault.domain.events import HINT_USED, HintUsedEvent
from aivault.services.ai_client import AIProviderClient, Hint
from aivault.services.errors import RemoteServiceError

if TYPE_CHECKING:
    from aivault.services.progression_service import ProgressionEngine

logger = logging.getLogger(__name__)

MIN_REMOTE_INTERVAL_SECONDS = 5.0
MAX_HINT_LEVEL = 3
ENCOURAGEMENT = "Think carefully about the problem and try a different approach."


def hint_level(attempt_count: int) -> int:
    return min(max(attempt_count, 0) + 1, MAX_HINT_LEVEL)


def fallback_hint(hints: Sequence[Mapping[str, Any]], level: int) -> Hint:
    """Pick the authored hint for ``level``, else the last one, else encouragement."""
    for hint in hints:
        if hint.get("level") == level:
            return Hint(source="fallback", text=str(hint.get("text", "")))
    if hints:
        return Hint(source="fallback", text=str(hints[-1].get("text", "")))
    return Hint(source="fallback", text=ENCOURAGEMENT)


class HintPolicy:
    """
    Decides where a hint comes from and tracks the hint budget.

    The remote provider is asked at most once per request, and only when it is
    configured and ``min_interval`` seconds have passed since the previous
    remote call. Anything else resolves to the puzzle's authored hints.
    """

    def __init__(
        self,
        store: PathStore,
        *,
        client: AIProviderClient | None = None,
        clock: Clock | None = None,
        min_interval: float = MIN_REMOTE_INTERVAL_SECONDS,
    ) -> None:
        self._store = store
        self._client = client
        self._clock = clock or time.monotonic
        self._min_interval = min_interval
        self._last_remote_call: float | None = None

    def hints_remaining(self) -> int:
        total = self._store.get("hints.total") or 0
        used = self._store.get("hints.used") or 0
        return max(total - used, 0)

    def use_hint(self) -> bool:
        """Spend one hint from the budget; False once the budget is exhausted."""
        total = self._store.get("hints.total") or 0
        used = self._store.get("hints.used") or 0
        if used >= total:
            return False
        used += 1
        self._store.set("hints.used", used)
        self._store.emit(HINT_USED, HintUsedEvent(used=used, remaining=max(total - used, 0)))
        return True

    def request_hint(self, context: Mapping[str, Any], attempt_count: int, character_id: str) -> Hint:
        level = hint_level(attempt_count)
        client = self._client if self._remote_allowed() else None
        if client is not None:
            self._last_remote_call = self._clock()
            try:
                return client.get_hint(context, level, character_id)
            except RemoteServiceError as exc:
                logger.warning("AI hint failed, using fallback: %s", exc)
        return fallback_hint(context.get("hints") or [], level)

    def request_hint_for(self, engine: "ProgressionEngine") -> Hint | None:
        """
        Spend a hint on the engine's active puzzle.

        Returns None when the budget is exhausted or when the active puzzle
        changed before the hint arrived.
        """
        puzzle = engine.current_puzzle
        token = engine.puzzle_token
        if puzzle is None or token is None:
            return None
        if not self.use_hint():
            return None
        hint = self.request_hint(engine.hint_context(), engine.attempts, puzzle.character)
        if engine.puzzle_token != token:
            logger.debug("Discarding hint for a puzzle that is no longer active")
            return None
        return hint

    def _remote_allowed(self) -> bool:
        if self._client is None or not self._client.enabled:
            return False
        if self._last_remote_call is None:
            return True
        elapsed = self._clock() - self._last_remote_call
        if elapsed < self._min_interval:
            logger.debug("AI hint rate limited (%.1fs since last call)", elapsed)
            return False
        return True
