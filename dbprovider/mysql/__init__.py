"""MySQL backend exports."""

from .pool import DBConnectionPool
from .properties import DEFAULT_CONNECTION_PROPERTIES, MysqlConnectionProperties
from .provider import MysqlServiceProvider

__all__ = [
    "DBConnectionPool",
    "DEFAULT_CONNECTION_PROPERTIES",
    "MysqlConnectionProperties",
    "MysqlServiceProvider",
]
