"""Low-level JSON helpers for catalog repositories."""
from __future__ import annotations

import json
from pathlib import Path

from .errors import DataLoadError


def load_json(path: Path) -> object:
    """Read and decode a catalog file, raising DataLoadError on any failure."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise DataLoadError(f"Catalog file not found: {path}") from exc
    except OSError as exc:
        raise DataLoadError(f"Unable to read catalog file: {path}") from exc

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DataLoadError(f"Invalid JSON in {path}: {exc}") from exc
