"""Service provider for the ``mysql`` implementation."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence

from ..providers.types import ConnectCallback
from .pool import DBConnectionPool
from .properties import DEFAULT_CONNECTION_PROPERTIES, MysqlConnectionProperties

PoolFactory = Callable[[MysqlConnectionProperties], DBConnectionPool]


class MysqlServiceProvider:
    """Builds MySQL connection pools from connection properties."""

    name = "mysql"
    version = "0.1.0"
    min_core = "0.1.0"

    def __init__(self, pool_factory: PoolFactory | None = None) -> None:
        self._pool_factory = pool_factory or DBConnectionPool

    def get_default_configuration(self) -> dict[str, Any]:
        """Return a fresh copy of the backend defaults."""

        return dict(DEFAULT_CONNECTION_PROPERTIES)

    def connect_sync(self, config: Mapping[str, Any]) -> DBConnectionPool:
        """Build a pool and connect it, blocking until the driver answers."""

        pool = self._pool_factory(MysqlConnectionProperties.coerce(config))
        pool.connect_sync()
        return pool

    async def connect(self, config: Mapping[str, Any], on_complete: ConnectCallback) -> None:
        """Build a pool and connect it, then call ``on_complete(error, pool)`` once.

        The pool is passed along even when ``error`` is set; it is ``None`` only
        when the record could not be turned into a pool.
        """

        pool: DBConnectionPool | None = None
        error: BaseException | None = None
        try:
            pool = self._pool_factory(MysqlConnectionProperties.coerce(config))
            await pool.connect()
        except Exception as exc:
            error = exc
        on_complete(error, pool)

    def get_provider_key(self, config: Mapping[str, Any]) -> str:
        """Identity of the connection target, used to share pools.

        The key carries the password in plaintext; never log or persist it.
        """

        props = MysqlConnectionProperties.coerce(config)
        return f"{props.implementation}://{props.endpoint}+{props.user}<{props.password}>"

    def list_native_modules(self) -> Sequence[str]:
        return []


__all__ = ["MysqlServiceProvider", "PoolFactory"]
