"""Validated connection properties for the MySQL backend."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict

from ..properties import normalize_legacy_keys

DEFAULT_CONNECTION_PROPERTIES: Mapping[str, Any] = MappingProxyType(
    {
        "implementation": "mysql",
        "database": "test",
        "host": "localhost",
        "port": 3306,
        "user": "",
        "password": "",
        "socket": None,
        "debug": True,
        "backend_debug": False,
    }
)


class MysqlConnectionProperties(BaseModel):
    """Connection record accepted by the MySQL provider and pool."""

    model_config = ConfigDict(frozen=True, extra="allow")

    implementation: str = DEFAULT_CONNECTION_PROPERTIES["implementation"]
    database: str = DEFAULT_CONNECTION_PROPERTIES["database"]
    host: str = DEFAULT_CONNECTION_PROPERTIES["host"]
    port: int = DEFAULT_CONNECTION_PROPERTIES["port"]
    user: str = DEFAULT_CONNECTION_PROPERTIES["user"]
    password: str = DEFAULT_CONNECTION_PROPERTIES["password"]
    socket: str | None = DEFAULT_CONNECTION_PROPERTIES["socket"]
    debug: bool = DEFAULT_CONNECTION_PROPERTIES["debug"]
    backend_debug: bool = DEFAULT_CONNECTION_PROPERTIES["backend_debug"]

    @property
    def endpoint(self) -> str:
        """Socket path when set, otherwise ``host:port``."""

        if self.socket:
            return self.socket
        return f"{self.host}:{self.port}"

    @classmethod
    def coerce(cls, config: Mapping[str, Any] | MysqlConnectionProperties) -> MysqlConnectionProperties:
        """Validate a mapping (legacy keys allowed); models pass through untouched."""

        if isinstance(config, cls):
            return config
        return cls.model_validate(normalize_legacy_keys(config))


__all__ = ["DEFAULT_CONNECTION_PROPERTIES", "MysqlConnectionProperties"]
