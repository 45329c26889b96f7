"""Elapsed game timer and per-room timings stored in the state tree."""
from __future__ import annotations

import time
from typing import Any, Dict

from aivault.core.store import PathStore
from aivault.core.types import Clock


def format_duration(total_seconds: int) -> str:
    """Format seconds as MM:SS, or HH:MM:SS from one hour up."""
    total_seconds = max(0, int(total_seconds))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


class GameTimer:
    """
    Counts whole seconds of play into ``timer.elapsed``.

    Time is read from a monotonic clock and folded into the state on
    :meth:`sync`; fractions of a second carry over to the next sync.
    ``startTime``/``endTime`` record wall-clock epoch milliseconds.
    """

    def __init__(
        self,
        store: PathStore,
        *,
        clock: Clock | None = None,
        wall_clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or time.monotonic
        self._wall_clock = wall_clock or time.time
        self._anchor: float | None = None

    @property
    def running(self) -> bool:
        return self._anchor is not None

    def start(self) -> None:
        if self._anchor is not None:
            return
        if not self._store.get("startTime"):
            self._store.set("startTime", self._wall_millis())
        self._store.set("timer.running", True)
        self._anchor = self._clock()

    def resume(self) -> None:
        self.start()

    def pause(self) -> None:
        self.sync()
        self._anchor = None
        self._store.set("timer.running", False)

    def stop(self) -> None:
        self.pause()
        self._store.set("endTime", self._wall_millis())

    def reset(self) -> None:
        self._anchor = None
        self._store.set("timer.running", False)
        self._store.set("timer.elapsed", 0)
        self._store.set("startTime", None)
        self._store.set("endTime", None)

    def sync(self) -> int:
        """Fold whole seconds since the last sync into ``timer.elapsed``."""
        elapsed = self._store.get("timer.elapsed") or 0
        if self._anchor is None:
            return elapsed
        whole_seconds = int(self._clock() - self._anchor)
        if whole_seconds > 0:
            self._anchor += whole_seconds
            elapsed += whole_seconds
            self._store.set("timer.elapsed", elapsed)
        return elapsed

    def elapsed(self) -> int:
        return self.sync()

    def formatted(self) -> str:
        return format_duration(self.elapsed())

    def start_room_timer(self, room_id: str) -> None:
        room_times = self._room_times()
        if room_id in room_times:
            return
        room_times[room_id] = {"start": self.elapsed(), "end": None}
        self._store.set("timer.roomTimes", room_times)

    def stop_room_timer(self, room_id: str) -> None:
        room_times = self._room_times()
        if room_id not in room_times:
            return
        room_times[room_id] = {**room_times[room_id], "end": self.elapsed()}
        self._store.set("timer.roomTimes", room_times)

    def room_time(self, room_id: str) -> int:
        entry = self._room_times().get(room_id)
        if not entry:
            return 0
        end = entry.get("end")
        if end is None:
            end = self.elapsed()
        return end - entry.get("start", 0)

    def _room_times(self) -> Dict[str, Any]:
        return dict(self._store.get("timer.roomTimes") or {})

    def _wall_millis(self) -> int:
        return int(self._wall_clock() * 1000)
