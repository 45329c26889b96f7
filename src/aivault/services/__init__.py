"""Service layer exports."""

from .errors import ConfigurationError, RemoteServiceError, RoomLockedError, SaveLoadError
from .game_service import GameService, GameSummary, RoomStatus, build_game_service
from .progression_service import ProgressionEngine, RoomEntry, SubmissionResult

__all__ = [
    "ConfigurationError",
    "RemoteServiceError",
    "RoomLockedError",
    "SaveLoadError",
    "GameService",
    "GameSummary",
    "RoomStatus",
    "build_game_service",
    "ProgressionEngine",
    "RoomEntry",
    "SubmissionResult",
]
