"""Service provider contract shared between the loader and backends."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Protocol, Sequence

ConnectCallback = Callable[[BaseException | None, Any], None]


class ServiceProvider(Protocol):
    """Contract implemented by database backends."""

    name: str
    version: str
    min_core: str

    def get_default_configuration(self) -> dict[str, Any]: ...

    def connect_sync(self, config: Mapping[str, Any]) -> Any: ...

    async def connect(self, config: Mapping[str, Any], on_complete: ConnectCallback) -> None: ...

    def get_provider_key(self, config: Mapping[str, Any]) -> str: ...

    def list_native_modules(self) -> Sequence[str]: ...


class ProviderError(RuntimeError):
    """Base error for provider discovery failures."""


class ProviderCompatibilityError(ProviderError):
    """Raised when a provider does not satisfy the minimum core version."""


class ProviderNotFoundError(ProviderError, LookupError):
    """Raised when no provider is registered for an implementation tag."""


__all__ = [
    "ConnectCallback",
    "ProviderCompatibilityError",
    "ProviderError",
    "ProviderNotFoundError",
    "ServiceProvider",
]
