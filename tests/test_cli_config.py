from __future__ import annotations

import json
from pathlib import Path

from aivault.presentation.cli import config as cli_config


def test_load_config_defaults_when_missing(tmp_path: Path) -> None:
    assert cli_config.load_config(tmp_path / "missing.json") == cli_config.default_config()


def test_load_config_ignores_garbage(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    assert cli_config.load_config(path) == cli_config.default_config()
    path.write_text("[1, 2]", encoding="utf-8")
    assert cli_config.load_config(path) == cli_config.default_config()


def test_load_config_normalizes_values(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps({"ai_provider": "skynet", "sound_enabled": "yes", "pacing_seconds": 99}),
        encoding="utf-8",
    )
    assert cli_config.load_config(path) == {"ai_provider": None, "sound_enabled": True, "pacing_seconds": 10.0}


def test_save_config_never_writes_the_api_key(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.json"
    cli_config.save_config({"ai_provider": "anthropic", "api_key": "sk-secret", "sound_enabled": False}, path)

    text = path.read_text(encoding="utf-8")
    assert "sk-secret" not in text
    assert cli_config.load_config(path) == {"ai_provider": "anthropic", "sound_enabled": False, "pacing_seconds": 0.0}


def test_env_key_defaults_provider_to_openai() -> None:
    merged = cli_config.apply_env_overrides(cli_config.default_config(), {cli_config.ENV_API_KEY: " sk-1 "})
    assert merged["api_key"] == "sk-1"
    assert merged["ai_provider"] == "openai"


def test_env_provider_overrides_file_value() -> None:
    merged = cli_config.apply_env_overrides(
        {"ai_provider": "openai"},
        {cli_config.ENV_AI_PROVIDER: "anthropic", cli_config.ENV_API_KEY: "k"},
    )
    assert merged["ai_provider"] == "anthropic"


def test_env_overrides_ignore_blank_and_unknown_values() -> None:
    base = cli_config.default_config()
    merged = cli_config.apply_env_overrides(base, {cli_config.ENV_AI_PROVIDER: "skynet", cli_config.ENV_API_KEY: "  "})
    assert merged == base
    assert "api_key" not in merged


def test_save_path_lives_in_user_data_dir(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(cli_config, "get_user_data_dir", lambda: tmp_path)
    assert cli_config.get_save_path() == tmp_path / "save.json"
    assert cli_config.get_default_config_path() == tmp_path / "config.json"
