"""Service-layer exceptions."""


class ConfigurationError(Exception):
    """Raised when a screen cannot load because the catalog or request is inconsistent."""


class RoomLockedError(ConfigurationError):
    """Raised when entering a room (or the vault) that has not been unlocked."""


class SaveLoadError(Exception):
    """Raised when the save file cannot be read, written or removed."""


class RemoteServiceError(Exception):
    """Raised when the remote AI provider fails or returns an unusable response."""
