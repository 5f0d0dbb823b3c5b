"""Connection pool handle backed by PyMySQL (blocking) and aiomysql (async)."""

from __future__ import annotations

import logging
from typing import Any, AsyncContextManager, Mapping

import aiomysql
import pymysql

from .properties import MysqlConnectionProperties

LOG = logging.getLogger(__name__)

DEFAULT_MAX_CONNECTIONS = 10
DEFAULT_CONNECT_TIMEOUT = 10.0


class DBConnectionPool:
    """Pool handle returned to callers of the MySQL provider.

    The handle only establishes connections. Checkout, recycling and sizing
    are left to aiomysql; the blocking side keeps a single PyMySQL connection.
    Driver errors are never wrapped.
    """

    def __init__(
        self,
        properties: Mapping[str, Any] | MysqlConnectionProperties,
        *,
        max_connections: int = DEFAULT_MAX_CONNECTIONS,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    ) -> None:
        self.properties = MysqlConnectionProperties.coerce(properties)
        self._max_connections = max_connections
        self._connect_timeout = connect_timeout
        self._connection: pymysql.connections.Connection | None = None
        self._pool: aiomysql.Pool | None = None

    @property
    def connection(self) -> pymysql.connections.Connection | None:
        """Connection opened by :meth:`connect_sync`, if any."""

        return self._connection

    @property
    def pool(self) -> aiomysql.Pool | None:
        """aiomysql pool created by :meth:`connect`, if any."""

        return self._pool

    def connect_sync(self) -> None:
        """Open a blocking connection; raises the driver's error on failure."""

        self._connection = pymysql.connect(
            database=self.properties.database,
            **self._connect_kwargs(),
        )
        self._log("Opened blocking MySQL connection")

    async def connect(self) -> None:
        """Create the aiomysql pool; raises the driver's error on failure."""

        self._pool = await aiomysql.create_pool(
            minsize=1,
            maxsize=self._max_connections,
            echo=self.properties.backend_debug,
            db=self.properties.database,
            **self._connect_kwargs(),
        )
        self._log("Created async MySQL pool", maxsize=self._max_connections)

    def acquire(self) -> AsyncContextManager[aiomysql.Connection]:
        """Acquire a connection from the async pool (``async with pool.acquire()``)."""

        if self._pool is None:
            raise RuntimeError("Pool is not connected; await connect() first.")
        return self._pool.acquire()

    def close(self) -> None:
        """Close the blocking connection and start closing the async pool."""

        if self._connection is not None:
            if self._connection.open:
                self._connection.close()
            self._connection = None
        if self._pool is not None:
            self._pool.close()
        self._log("Closed MySQL pool")

    async def wait_closed(self) -> None:
        """Wait until every async connection has been released and closed."""

        if self._pool is None:
            return
        await self._pool.wait_closed()
        self._pool = None

    def _connect_kwargs(self) -> dict[str, object]:
        props = self.properties
        kwargs: dict[str, object] = {
            "user": props.user,
            "password": props.password,
            "connect_timeout": self._connect_timeout,
        }
        if props.socket:
            kwargs["unix_socket"] = props.socket
        else:
            kwargs["host"] = props.host
            kwargs["port"] = props.port
        return kwargs

    def _log(self, message: str, **extra: object) -> None:
        if not self.properties.debug:
            return
        LOG.debug(
            message,
            extra={"endpoint": self.properties.endpoint, "database": self.properties.database, **extra},
        )


__all__ = ["DBConnectionPool", "DEFAULT_CONNECT_TIMEOUT", "DEFAULT_MAX_CONNECTIONS"]
