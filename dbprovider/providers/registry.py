"""Registry mapping implementation tags to service providers."""

from __future__ import annotations

from .loader import ProviderLoader
from .types import ProviderNotFoundError, ServiceProvider


class ProviderRegistry:
    """Collects service providers, discovering them on first lookup."""

    def __init__(self, loader: ProviderLoader | None = None) -> None:
        self._loader = loader or ProviderLoader()
        self._providers: dict[str, ServiceProvider] = {}
        self._discovered = False

    def register(self, provider: ServiceProvider) -> None:
        """Register a provider under its ``name``, replacing any previous one."""

        if not provider.name:
            raise ValueError("Provider is missing a name")
        self._providers[provider.name] = provider

    def get(self, name: str) -> ServiceProvider:
        """Return the provider for ``name``."""

        self._ensure_discovered()
        try:
            return self._providers[name]
        except KeyError:
            raise ProviderNotFoundError(f"No service provider for implementation '{name}'") from None

    def names(self) -> list[str]:
        """Return the known implementation tags."""

        self._ensure_discovered()
        return sorted(self._providers)

    def _ensure_discovered(self) -> None:
        if self._discovered:
            return
        discovered = self._loader.discover()
        self._discovered = True
        for found in discovered:
            self._providers.setdefault(found.name, found.provider)


_default_registry: ProviderRegistry | None = None


def default_registry() -> ProviderRegistry:
    global _default_registry
    if _default_registry is None:
        _default_registry = ProviderRegistry()
    return _default_registry


def get_provider(name: str) -> ServiceProvider:
    """Look up a provider in the process-wide registry."""

    return default_registry().get(name)


__all__ = ["ProviderRegistry", "default_registry", "get_provider"]
