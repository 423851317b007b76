"""Runtime settings."""

from __future__ import annotations

from pathlib import Path

import msgspec

from .errors import ConfigError

DEFAULT_SETTINGS_PATH = Path.home() / ".discord_runtime" / "settings.toml"


class CacheSettings(msgspec.Struct, forbid_unknown_fields=True):
    """Size limits for entity caches. None means unbounded."""

    channel_limit: int | None = None
    thread_limit: int | None = None
    guild_limit: int | None = None

    def __post_init__(self) -> None:
        for name in ("channel_limit", "thread_limit", "guild_limit"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must be non-negative (got {value})")


class InteractionSettings(msgspec.Struct, forbid_unknown_fields=True):
    # Used when reply, defer or follow_up is called without an explicit ephemeral.
    default_ephemeral: bool = False


class RuntimeSettings(msgspec.Struct, forbid_unknown_fields=True):
    """Root settings structure."""

    application_id: int | None = None
    cache: CacheSettings = msgspec.field(default_factory=CacheSettings)
    interactions: InteractionSettings = msgspec.field(
        default_factory=InteractionSettings
    )


def load_settings(path: Path | None = None) -> RuntimeSettings:
    """Load settings from a TOML or JSON file.

    A missing file yields the defaults. Anything malformed raises ConfigError.
    """
    path = path or DEFAULT_SETTINGS_PATH
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return RuntimeSettings()
    except OSError as exc:
        raise ConfigError(f"Failed to read settings file {path}: {exc}") from exc

    try:
        if path.suffix == ".json":
            return msgspec.json.decode(raw, type=RuntimeSettings)
        return msgspec.toml.decode(raw, type=RuntimeSettings)
    except (msgspec.DecodeError, msgspec.ValidationError) as exc:
        raise ConfigError(f"Invalid settings in {path}: {exc}") from exc
