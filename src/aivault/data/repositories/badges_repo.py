"""Repository for badge definitions."""
from __future__ import annotations

from typing import Dict

from aivault.data.errors import DataValidationError
from aivault.data.repositories.base import RepositoryBase
from aivault.domain.defs import BadgeDef


class BadgesRepository(RepositoryBase[BadgeDef]):
    """Loads badge display metadata; award rules live in the achievement service."""

    def __init__(self, base_path=None) -> None:
        super().__init__("badges.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, BadgeDef]:
        entries = self._require_list(raw.get("badges"), "badges.json.badges")
        definitions: Dict[str, BadgeDef] = {}
        for index, entry in enumerate(entries):
            ctx = f"badges[{index}]"
            mapping = self._require_mapping(entry, ctx)
            badge_id = self._require_str(mapping.get("id"), f"{ctx}.id")
            if badge_id in definitions:
                raise DataValidationError(f"Duplicate badge id '{badge_id}'.")
            definitions[badge_id] = BadgeDef(
                badge_id=badge_id,
                name=self._require_str(mapping.get("name"), f"{ctx}.name"),
                criteria=self._require_str(mapping.get("criteria"), f"{ctx}.criteria"),
                icon=str(mapping.get("icon", "")),
            )
        return definitions
