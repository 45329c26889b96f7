"""Path-addressable state tree with synchronous publish/subscribe."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, MutableMapping

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]
Unsubscribe = Callable[[], None]

STATE_CHANGE = "stateChange"


def change_event(path: str) -> str:
    """Return the event name emitted when ``path`` is set."""
    return f"change:{path}"


@dataclass(frozen=True, slots=True)
class StateChangedEvent:
    """Generic mutation notice emitted for every ``set``."""

    path: str
    value: Any
    old_value: Any


@dataclass(frozen=True, slots=True)
class PathChangedEvent:
    """Payload of ``change:<path>`` for the exact path that was set."""

    value: Any
    old_value: Any


@dataclass(frozen=True, slots=True)
class BranchChangedEvent:
    """Payload of ``change:<top>`` when a nested path under ``top`` was set."""

    path: str
    value: Any


def _list_index(items: List[Any], key: str, path: str) -> int:
    if not key.isdigit() or int(key) >= len(items):
        raise ValueError(f"'{key}' is not an index of the list at '{path}'.")
    return int(key)


class PathStore:
    """
    Mutable tree of named fields addressed by dotted paths.

    ``set`` creates intermediate mappings as needed and assigns into lists
    by index (an index outside the list raises ValueError). It notifies, in order:
    ``stateChange``, ``change:<path>`` and, for nested paths, ``change:<top>``.
    Handlers run synchronously in subscription order; an exception raised by
    one handler is logged and the remaining handlers still run.
    """

    def __init__(self, initial: MutableMapping[str, Any] | None = None) -> None:
        self._tree: MutableMapping[str, Any] = initial if initial is not None else {}
        self._listeners: Dict[str, List[Handler]] = {}

    @property
    def tree(self) -> MutableMapping[str, Any]:
        return self._tree

    def get(self, path: str = "") -> Any:
        """Return the value at ``path`` or None when any segment is missing."""
        if not path:
            return self._tree
        value: Any = self._tree
        for key in path.split("."):
            if isinstance(value, MutableMapping):
                value = value.get(key)
            elif isinstance(value, list) and key.isdigit() and int(key) < len(value):
                value = value[int(key)]
            else:
                return None
            if value is None:
                return None
        return value

    def set(self, path: str, value: Any) -> None:
        """Assign ``value`` at ``path`` and emit the change notifications."""
        if not path:
            raise ValueError("Cannot set the root of the state tree; use replace().")
        keys = path.split(".")
        target: Any = self._tree
        for key in keys[:-1]:
            if isinstance(target, list):
                target = target[_list_index(target, key, path)]
                if not isinstance(target, (MutableMapping, list)):
                    raise ValueError(f"Cannot descend into a list element while setting '{path}'.")
                continue
            child = target.get(key)
            if not isinstance(child, (MutableMapping, list)):
                if child is not None:
                    logger.debug("Replacing non-container value at '%s' while setting '%s'", key, path)
                child = {}
                target[key] = child
            target = child
        last_key = keys[-1]
        if isinstance(target, list):
            index = _list_index(target, last_key, path)
            old_value = target[index]
            target[index] = value
        else:
            old_value = target.get(last_key)
            target[last_key] = value

        self.emit(STATE_CHANGE, StateChangedEvent(path=path, value=value, old_value=old_value))
        self.emit(change_event(path), PathChangedEvent(value=value, old_value=old_value))
        if len(keys) > 1:
            self.emit(change_event(keys[0]), BranchChangedEvent(path=path, value=value))

    def replace(self, tree: MutableMapping[str, Any]) -> None:
        """Swap the whole tree without per-path notifications."""
        self._tree = tree

    def subscribe(self, event: str, handler: Handler) -> Unsubscribe:
        """Register ``handler`` for ``event`` and return a callable that removes it."""
        self._listeners.setdefault(event, []).append(handler)
        return lambda: self.unsubscribe(event, handler)

    def unsubscribe(self, event: str, handler: Handler) -> None:
        handlers = self._listeners.get(event)
        if not handlers:
            return
        self._listeners[event] = [existing for existing in handlers if existing is not handler]

    def emit(self, event: str, payload: Any = None) -> None:
        """Dispatch ``payload`` to every handler of ``event``, isolating failures."""
        for handler in list(self._listeners.get(event, ())):
            try:
                handler(payload)
            except Exception:
                logger.exception("Error in listener for '%s'", event)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))
