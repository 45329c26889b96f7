"""Badge definition data structures."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class BadgeDef:
    badge_id: str
    name: str
    criteria: str
    icon: str
