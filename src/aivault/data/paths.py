"""Helpers for locating the bundled puzzle catalog."""
from __future__ import annotations

import os
from pathlib import Path

CATALOG_DIR_ENV = "AIVAULT_CATALOG_DIR"


def get_repo_root() -> Path:
    """Return the repository root (the directory holding ``data/``)."""
    return Path(__file__).resolve().parents[3]


def get_definitions_path(base_path: Path | str | None = None) -> Path:
    """Return the catalog directory, honouring an explicit path or AIVAULT_CATALOG_DIR."""
    if base_path is not None:
        return Path(base_path)
    override = os.environ.get(CATALOG_DIR_ENV)
    if override:
        return Path(override)
    return get_repo_root() / "data" / "definitions"
