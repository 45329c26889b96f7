"""Exceptions raised while loading the puzzle catalog."""


class DataError(Exception):
    """Base exception for the catalog data layer."""


class DataLoadError(DataError):
    """Raised when a catalog file is missing or is not valid JSON."""


class DataValidationError(DataError):
    """Raised when catalog content is structurally invalid or names an unknown kind."""


class DataReferenceError(DataError):
    """Raised when a catalog entry references a room or character that does not exist."""
