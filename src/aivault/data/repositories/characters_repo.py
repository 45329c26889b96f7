"""Repository for guide character definitions."""
from __future__ import annotations

from typing import Dict, Tuple

from aivault.data.repositories.base import RepositoryBase
from aivault.domain.defs import CharacterDef

DEFAULT_CHARACTER_ID = "mentor"


class CharactersRepository(RepositoryBase[CharacterDef]):
    """Loads the characters that narrate rooms and deliver hints."""

    def __init__(self, base_path=None) -> None:
        super().__init__("characters.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, CharacterDef]:
        characters = self._require_mapping(raw.get("characters"), "characters.json.characters")
        definitions: Dict[str, CharacterDef] = {}
        for character_id, payload in characters.items():
            ctx = f"character '{character_id}'"
            mapping = self._require_mapping(payload, ctx)
            dialogue_raw = self._require_mapping(mapping.get("fallbackDialogue", {}), f"{ctx} fallbackDialogue")
            dialogue: Dict[str, Tuple[str, ...]] = {}
            for kind, lines in dialogue_raw.items():
                if isinstance(lines, str):
                    dialogue[kind] = (lines,)
                    continue
                entries = self._require_list(lines, f"{ctx} fallbackDialogue.{kind}")
                dialogue[kind] = tuple(
                    self._require_str(line, f"{ctx} fallbackDialogue.{kind}[{index}]")
                    for index, line in enumerate(entries)
                )
            definitions[character_id] = CharacterDef(
                character_id=character_id,
                name=self._require_str(mapping.get("name"), f"{ctx} name"),
                emoji=str(mapping.get("emoji", "")),
                fallback_dialogue=dialogue,
            )
        return definitions

    def display_name(self, character_id: str) -> str:
        """Return the character's name, or the id itself for unknown characters."""
        if self.has(character_id):
            return self.get(character_id).name
        return character_id
