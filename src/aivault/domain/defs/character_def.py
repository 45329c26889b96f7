"""Guide character definition data structures."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Tuple


@dataclass(frozen=True, slots=True)
class CharacterDef:
    character_id: str
    name: str
    emoji: str
    fallback_dialogue: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
