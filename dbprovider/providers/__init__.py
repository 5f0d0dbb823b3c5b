"""Provider loader exports."""

from .loader import DiscoveredProvider, ProviderLoader
from .registry import ProviderRegistry, default_registry, get_provider
from .types import (
    ConnectCallback,
    ProviderCompatibilityError,
    ProviderError,
    ProviderNotFoundError,
    ServiceProvider,
)

__all__ = [
    "ConnectCallback",
    "DiscoveredProvider",
    "ProviderCompatibilityError",
    "ProviderError",
    "ProviderLoader",
    "ProviderNotFoundError",
    "ProviderRegistry",
    "ServiceProvider",
    "default_registry",
    "get_provider",
]
