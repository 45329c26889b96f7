"""Repository exports."""

from .badges_repo import BadgesRepository
from .characters_repo import DEFAULT_CHARACTER_ID, CharactersRepository
from .meta_puzzle_repo import MetaPuzzleRepository
from .rooms_repo import RoomsRepository

__all__ = [
    "DEFAULT_CHARACTER_ID",
    "BadgesRepository",
    "CharactersRepository",
    "MetaPuzzleRepository",
    "RoomsRepository",
]
