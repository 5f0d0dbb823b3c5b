"""Helpers for normalizing backend-agnostic connection properties."""

from __future__ import annotations

from typing import Any, Mapping

LEGACY_KEYS: Mapping[str, str] = {
    "mysql_host": "host",
    "mysql_port": "port",
    "mysql_user": "user",
    "mysql_password": "password",
    "mysql_socket": "socket",
    "mysql_debug": "backend_debug",
}


def normalize_legacy_keys(properties: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy with ``mysql_*`` keys renamed; canonical keys win on conflict."""

    normalized: dict[str, Any] = {}
    for key, value in properties.items():
        canonical = LEGACY_KEYS.get(key)
        if canonical is None:
            normalized[key] = value
        elif canonical not in properties:
            normalized[canonical] = value
    return normalized


def merge_properties(defaults: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Overlay ``overrides`` on ``defaults`` without mutating either."""

    merged = dict(defaults)
    merged.update(normalize_legacy_keys(overrides))
    return merged


__all__ = ["LEGACY_KEYS", "merge_properties", "normalize_legacy_keys"]
