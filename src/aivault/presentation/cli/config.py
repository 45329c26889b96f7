"""CLI configuration: per-user paths, the options file and environment overrides."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping

from aivault.services.ai_client import PROVIDERS
from aivault.services.save_storage import SAVE_FILENAME

logger = logging.getLogger(__name__)

ENV_API_KEY = "AIVAULT_API_KEY"
ENV_AI_PROVIDER = "AIVAULT_AI_PROVIDER"
ENV_DEBUG = "AIVAULT_DEBUG"

_DEFAULT_PROVIDER = "openai"
_MAX_PACING_SECONDS = 10.0


def get_user_data_dir() -> Path:
    """Return the per-user data directory."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "AIVault"
        return Path.home() / "AIVault"
    return Path.home() / ".config" / "ai_vault"


def get_default_config_path() -> Path:
    return get_user_data_dir() / "config.json"


def get_save_path() -> Path:
    return get_user_data_dir() / SAVE_FILENAME


def default_config() -> Dict[str, Any]:
    return {"ai_provider": None, "sound_enabled": True, "pacing_seconds": 0.0}


def _normalize_provider(value: object) -> str | None:
    return value if isinstance(value, str) and value in PROVIDERS else None


def _normalize_pacing(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return min(max(float(value), 0.0), _MAX_PACING_SECONDS)


def normalize_config(raw: Mapping[str, Any]) -> Dict[str, Any]:
    sound = raw.get("sound_enabled", True)
    return {
        "ai_provider": _normalize_provider(raw.get("ai_provider")),
        "sound_enabled": sound if isinstance(sound, bool) else True,
        "pacing_seconds": _normalize_pacing(raw.get("pacing_seconds")),
    }


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """Load config from disk or return defaults."""
    config_path = path or get_default_config_path()
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return default_config()
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", config_path, exc)
        return default_config()
    if not isinstance(raw, dict):
        return default_config()
    return normalize_config(raw)


def save_config(config: Mapping[str, Any], path: Path | None = None) -> None:
    """Persist config to disk. Credentials are never part of the payload."""
    config_path = path or get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    payload = normalize_config(config)
    config_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")


def apply_env_overrides(config: Mapping[str, Any], environ: Mapping[str, str] | None = None) -> Dict[str, Any]:
    """Layer environment settings over ``config``; the API key only ever comes from here."""
    env = os.environ if environ is None else environ
    merged = dict(config)
    provider = _normalize_provider(env.get(ENV_AI_PROVIDER))
    if provider:
        merged["ai_provider"] = provider
    api_key = env.get(ENV_API_KEY, "").strip()
    if api_key:
        merged["api_key"] = api_key
        merged["ai_provider"] = merged.get("ai_provider") or _DEFAULT_PROVIDER
    return merged
