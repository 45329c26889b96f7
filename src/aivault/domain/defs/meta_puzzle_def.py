"""Meta-puzzle definition data structures."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from aivault.core.types import MetaInputType


@dataclass(frozen=True, slots=True)
class MetaStepDef:
    instruction: str
    input_type: MetaInputType
    answer: str | float
    tolerance: float = 0.0
    options: Tuple[str, ...] = ()
    minimum: float | None = None
    maximum: float | None = None
    placeholder: str | None = None


@dataclass(frozen=True, slots=True)
class MetaPuzzleDef:
    title: str
    steps: Tuple[MetaStepDef, ...]
