"""App configuration loading helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomllib

from pydantic import BaseModel, Field

CONFIG_FILE = Path.home() / ".config" / "dbprovider" / "config.toml"

_PROFILE_STRINGS = ("implementation", "database", "host", "user", "password", "socket")
_PROFILE_FLAGS = ("debug", "backend_debug")


class ProfileNotFoundError(LookupError):
    """Raised when a named connection profile is not configured."""


class ConnectionProfileConfig(BaseModel):
    """Connection profile stored in config.toml; unset fields fall back to provider defaults."""

    name: str
    implementation: str | None = None
    database: str | None = None
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    socket: str | None = None
    debug: bool | None = None
    backend_debug: bool | None = None

    def overrides(self) -> dict[str, Any]:
        """Connection properties set by this profile."""

        return self.model_dump(exclude={"name"}, exclude_none=True)


class AppConfig(BaseModel):
    """Shape of the configuration file."""

    default_profile: str | None = None
    profiles: list[ConnectionProfileConfig] = Field(default_factory=list)

    def has_profile(self, name: str) -> bool:
        return any(profile.name == name for profile in self.profiles)

    def profile(self, name: str) -> ConnectionProfileConfig:
        for profile in self.profiles:
            if profile.name == name:
                return profile
        raise ProfileNotFoundError(f"Profile '{name}' not found.")

    def with_profile(self, profile: ConnectionProfileConfig) -> AppConfig:
        """Return a copy with ``profile`` added or replacing one of the same name."""

        profiles = [entry for entry in self.profiles if entry.name != profile.name]
        profiles.append(profile)
        return self.model_copy(update={"profiles": profiles})

    def with_default_profile(self, name: str) -> AppConfig:
        return self.model_copy(update={"default_profile": name})


def load_config() -> AppConfig:
    """Load configuration from disk; fall back to defaults if missing."""

    try:
        data = _read_config_file()
    except FileNotFoundError:
        return AppConfig()
    except (tomllib.TOMLDecodeError, OSError):
        return AppConfig()

    profiles = [ConnectionProfileConfig(**profile) for profile in data.get("profiles", [])]
    return AppConfig(default_profile=data.get("default_profile"), profiles=profiles)


def save_config(config: AppConfig) -> None:
    """Persist configuration to disk."""

    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    lines: list[str] = []
    if config.default_profile:
        lines.append(f"default_profile = {_quote(config.default_profile)}")
    for profile in config.profiles:
        lines.append("")
        lines.append("[[profiles]]")
        lines.append(f"name = {_quote(profile.name)}")
        for key in _PROFILE_STRINGS:
            value = getattr(profile, key)
            if value is not None:
                lines.append(f"{key} = {_quote(value)}")
        if profile.port is not None:
            lines.append(f"port = {profile.port}")
        for key in _PROFILE_FLAGS:
            value = getattr(profile, key)
            if value is not None:
                lines.append(f"{key} = {str(value).lower()}")
    CONFIG_FILE.write_text("\n".join(lines) + "\n", encoding="utf-8")


def _quote(value: str) -> str:
    """Render ``value`` as a TOML basic string."""

    escaped: list[str] = []
    for char in value:
        if char in ('"', "\\"):
            escaped.append("\\" + char)
        elif char < " " or char == "\x7f":
            escaped.append(f"\\u{ord(char):04x}")
        else:
            escaped.append(char)
    return '"' + "".join(escaped) + '"'


def _read_config_file() -> dict[str, Any]:
    with CONFIG_FILE.open("rb") as handle:
        raw = tomllib.load(handle)
    data: dict[str, Any] = {}
    default_profile = raw.get("default_profile")
    if isinstance(default_profile, str):
        data["default_profile"] = default_profile
    profiles = raw.get("profiles")
    if isinstance(profiles, list):
        parsed_profiles: list[dict[str, Any]] = []
        for profile in profiles:
            if not isinstance(profile, dict):
                continue
            parsed: dict[str, Any] = {}
            for key in ("name", *_PROFILE_STRINGS):
                value = profile.get(key)
                if isinstance(value, str):
                    parsed[key] = value
            port = profile.get("port")
            if isinstance(port, int):
                parsed["port"] = port
            for key in _PROFILE_FLAGS:
                value = profile.get(key)
                if isinstance(value, bool):
                    parsed[key] = value
            if parsed.get("name"):
                parsed_profiles.append(parsed)
        data["profiles"] = parsed_profiles
    return data


__all__ = [
    "AppConfig",
    "CONFIG_FILE",
    "ConnectionProfileConfig",
    "ProfileNotFoundError",
    "load_config",
    "save_config",
]
