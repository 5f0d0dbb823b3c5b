"""Connection providers turning connection properties into live database pools."""

__version__ = "0.1.0"

from .config import AppConfig, ConnectionProfileConfig, load_config, save_config  # noqa: E402
from .mysql import DBConnectionPool, MysqlConnectionProperties, MysqlServiceProvider  # noqa: E402
from .providers import ProviderNotFoundError, ProviderRegistry, get_provider  # noqa: E402
from .session import SessionFactory, SessionFactoryRegistry, resolve_properties  # noqa: E402

__all__ = [
    "AppConfig",
    "ConnectionProfileConfig",
    "DBConnectionPool",
    "MysqlConnectionProperties",
    "MysqlServiceProvider",
    "ProviderNotFoundError",
    "ProviderRegistry",
    "SessionFactory",
    "SessionFactoryRegistry",
    "__version__",
    "get_provider",
    "load_config",
    "resolve_properties",
    "save_config",
]
