from __future__ import annotations

from pathlib import Path

import pytest

from discord_runtime.errors import ConfigError
from discord_runtime.settings import RuntimeSettings, load_settings


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    assert load_settings(tmp_path / "absent.toml") == RuntimeSettings()


def test_toml_settings(tmp_path: Path) -> None:
    path = tmp_path / "settings.toml"
    path.write_text(
        "application_id = 42\n"
        "[cache]\nchannel_limit = 10\nthread_limit = 0\n"
        "[interactions]\ndefault_ephemeral = true\n",
        encoding="utf-8",
    )
    settings = load_settings(path)

    assert settings.application_id == 42
    assert settings.cache.channel_limit == 10
    assert settings.cache.thread_limit == 0
    assert settings.interactions.default_ephemeral is True


def test_json_settings(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text('{"application_id": 7}', encoding="utf-8")
    assert load_settings(path).application_id == 7


@pytest.mark.parametrize(
    "content",
    [
        "[cache]\nchannel_limit = 'lots'\n",
        "[cache]\nchannel_limit = -1\n",
        "unknown_key = 1\n",
        "not toml at all [",
    ],
)
def test_invalid_settings(tmp_path: Path, content: str) -> None:
    path = tmp_path / "settings.toml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(path)
