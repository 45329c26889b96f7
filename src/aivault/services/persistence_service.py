"""Debounced persistence of the state tree with credential redaction."""
from __future__ import annotations

import copy
import json
import logging
from typing import Any, Dict, Tuple

from aivault.core.scheduling import ScheduledTask, Scheduler
from aivault.core.store import STATE_CHANGE, PathStore
from aivault.domain.events import STATE_LOADED, STATE_RESET, StateSnapshotEvent
from aivault.domain.merge import deep_merge
from aivault.domain.state import CREDENTIAL_PATHS, default_state
from aivault.services.errors import SaveLoadError
from aivault.services.save_storage import SaveFileStore

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 1.0

# Counters that must load as integers; anything else falls back to the default.
_INTEGER_PATHS: Tuple[Tuple[str, ...], ...] = (
    ("hints", "total"),
    ("hints", "used"),
    ("score", "points"),
    ("timer", "elapsed"),
    ("currentPuzzleIndex",),
)


def redact_credentials(snapshot: Dict[str, Any]) -> Dict[str, Any]:
    """Null out every credential field of ``snapshot`` in place and return it."""
    for path in CREDENTIAL_PATHS:
        *parents, leaf = path.split(".")
        target: Any = snapshot
        for key in parents:
            target = target.get(key) if isinstance(target, dict) else None
        if isinstance(target, dict) and leaf in target:
            target[leaf] = None
    return snapshot


def normalize_loaded_state(state: Dict[str, Any]) -> Dict[str, Any]:
    """Repair a merged save in place: unique string badges and integer counters."""
    badges = state.get("badges")
    unique: list[str] = []
    for badge in badges if isinstance(badges, list) else ():
        if isinstance(badge, str) and badge not in unique:
            unique.append(badge)
    if badges != unique:
        logger.warning("Repaired badges list in saved game")
    state["badges"] = unique

    defaults = default_state()
    for path in _INTEGER_PATHS:
        *parents, leaf = path
        target: Any = state
        fallback: Any = defaults
        for key in parents:
            target = target.get(key) if isinstance(target, dict) else None
            fallback = fallback[key]
        if not isinstance(target, dict):
            continue
        value = target.get(leaf)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            logger.warning("Replacing invalid %s in saved game: %r", ".".join(path), value)
            target[leaf] = fallback[leaf]
    return state


class PersistenceGateway:
    """
    Saves the store after every mutation, coalescing bursts into one write.

    Each ``stateChange`` cancels the pending save and schedules a new one
    ``debounce_seconds`` out. The save snapshots the store when it runs, so
    the state written is always the latest one. Storage failures are logged
    and the game carries on in memory. Nothing is written until a game has
    been started (:meth:`clear_save`) or loaded (:meth:`load`), so merely
    launching the game never overwrites an existing save.
    """

    def __init__(
        self,
        store: PathStore,
        storage: SaveFileStore,
        scheduler: Scheduler,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self._store = store
        self._storage = storage
        self._scheduler = scheduler
        self._debounce_seconds = debounce_seconds
        self._pending: ScheduledTask | None = None
        self._active = False
        self._unsubscribe = store.subscribe(STATE_CHANGE, lambda _event: self._schedule_save())

    @property
    def active(self) -> bool:
        return self._active

    def activate(self) -> None:
        """Allow writes. Until a game is started or loaded the save file is left alone."""
        self._active = True

    @property
    def save_pending(self) -> bool:
        return self._pending is not None and self._pending.pending

    def snapshot(self) -> Dict[str, Any]:
        return redact_credentials(copy.deepcopy(dict(self._store.tree)))

    def save(self) -> bool:
        """Write the current state now; return False if the write failed."""
        if not self._active:
            logger.debug("No game in progress; leaving the save file untouched")
            return False
        self._cancel_pending()
        try:
            text = json.dumps(self.snapshot(), indent=2, sort_keys=True)
            self._storage.write(text)
        except (SaveLoadError, TypeError, ValueError) as exc:
            logger.warning("Failed to save game state: %s", exc)
            return False
        return True

    def flush(self) -> bool:
        """Write immediately if a debounced save is waiting."""
        if not self.save_pending:
            return False
        return self.save()

    def load(self) -> bool:
        """Merge the saved blob over defaults; leave state untouched on any failure."""
        try:
            text = self._storage.read()
        except SaveLoadError as exc:
            logger.warning("Failed to load game state: %s", exc)
            return False
        if text is None:
            return False
        try:
            parsed = json.loads(text)
        except ValueError as exc:
            logger.warning("Failed to load game state: %s", exc)
            return False
        if not isinstance(parsed, dict):
            logger.warning("Failed to load game state: save root is not an object")
            return False
        merged = normalize_loaded_state(deep_merge(default_state(), parsed))
        self._store.replace(merged)
        self._cancel_pending()
        self._active = True
        self._store.emit(STATE_LOADED, StateSnapshotEvent(state=merged))
        return True

    def has_save(self) -> bool:
        return self._storage.exists()

    def clear_save(self) -> None:
        """Delete the save and reset the store to defaults."""
        self._cancel_pending()
        try:
            self._storage.delete()
        except SaveLoadError as exc:
            logger.warning("Failed to clear saved game: %s", exc)
        fresh = default_state()
        self._store.replace(fresh)
        self._active = True
        self._store.emit(STATE_RESET, StateSnapshotEvent(state=fresh))

    def close(self) -> None:
        self._unsubscribe()
        self._cancel_pending()

    def _schedule_save(self) -> None:
        if not self._active:
            return
        self._cancel_pending()
        self._pending = self._scheduler.call_later(self._debounce_seconds, self._run_scheduled_save)

    def _run_scheduled_save(self) -> None:
        self._pending = None
        self.save()

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
