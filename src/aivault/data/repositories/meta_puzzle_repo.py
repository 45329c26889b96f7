"""Repository for the final meta-puzzle."""
from __future__ import annotations

from typing import Dict, List

from aivault.data.errors import DataValidationError
from aivault.data.repositories.base import RepositoryBase
from aivault.domain.defs import MetaPuzzleDef, MetaStepDef

_INPUT_TYPES = ("text", "number", "choice", "slider")
_META_KEY = "meta"


class MetaPuzzleRepository(RepositoryBase[MetaPuzzleDef]):
    """Loads the multi-step vault challenge unlocked after every room."""

    def __init__(self, base_path=None) -> None:
        super().__init__("meta_puzzle.json", base_path)

    def definition(self) -> MetaPuzzleDef:
        return self.get(_META_KEY)

    def _build(self, raw: dict[str, object]) -> Dict[str, MetaPuzzleDef]:
        title = raw.get("title", "The AI Vault")
        steps_raw = self._require_list(raw.get("steps"), "meta_puzzle.json.steps")
        if not steps_raw:
            raise DataValidationError("meta_puzzle.json must define at least one step.")
        steps: List[MetaStepDef] = []
        for index, entry in enumerate(steps_raw):
            steps.append(self._parse_step(entry, f"meta step {index + 1}"))
        return {_META_KEY: MetaPuzzleDef(title=str(title), steps=tuple(steps))}

    def _parse_step(self, entry: object, ctx: str) -> MetaStepDef:
        mapping = self._require_mapping(entry, ctx)
        instruction = self._require_str(mapping.get("instruction"), f"{ctx} instruction")
        input_type = mapping.get("inputType")
        if input_type not in _INPUT_TYPES:
            raise DataValidationError(f"{ctx} inputType must be one of {', '.join(_INPUT_TYPES)}.")
        answer = mapping.get("answer")
        if input_type in ("number", "slider"):
            answer = self._require_number(answer, f"{ctx} answer")
        else:
            answer = self._require_str(answer, f"{ctx} answer")
        options = tuple(
            self._require_str(option, f"{ctx} options[{i}]")
            for i, option in enumerate(self._require_list(mapping.get("options", []), f"{ctx} options"))
        )
        if input_type == "choice" and answer not in options:
            raise DataValidationError(f"{ctx} answer must be one of its options.")
        minimum = mapping.get("min")
        maximum = mapping.get("max")
        if input_type == "slider":
            minimum = self._require_number(minimum, f"{ctx} min")
            maximum = self._require_number(maximum, f"{ctx} max")
            if not minimum <= answer <= maximum:
                raise DataValidationError(f"{ctx} answer must lie within min/max.")
        tolerance = mapping.get("tolerance", 0)
        tolerance = self._require_number(tolerance, f"{ctx} tolerance")
        placeholder = mapping.get("placeholder")
        return MetaStepDef(
            instruction=instruction,
            input_type=input_type,  # type: ignore[arg-type]
            answer=answer,
            tolerance=float(tolerance),
            options=options,
            minimum=minimum,
            maximum=maximum,
            placeholder=placeholder if isinstance(placeholder, str) else None,
        )
