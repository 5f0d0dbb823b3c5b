"""Provider loader implementation."""

from __future__ import annotations

import importlib.metadata as metadata
import inspect
import logging
from dataclasses import dataclass
from typing import Iterable

from dbprovider import __version__ as CORE_VERSION

from .types import ProviderCompatibilityError, ProviderError, ServiceProvider

LOG = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "dbprovider.providers"

BUILTIN_PROVIDERS: tuple[tuple[str, str], ...] = (
    ("mysql", "dbprovider.mysql:MysqlServiceProvider"),
)


def _parse_version(value: str) -> tuple[int, int, int]:
    """Parse a dotted string into a comparable tuple."""

    parts = value.split(".")
    ints: list[int] = []
    for chunk in parts[:3]:
        try:
            ints.append(int(chunk))
        except ValueError:
            ints.append(0)
    while len(ints) < 3:
        ints.append(0)
    return ints[0], ints[1], ints[2]


@dataclass(slots=True, frozen=True)
class DiscoveredProvider:
    """Metadata captured from entry point discovery."""

    name: str
    version: str
    min_core: str
    entry_point: metadata.EntryPoint
    provider: ServiceProvider


class ProviderLoader:
    """Discovers service providers exposed via entry points."""

    def __init__(
        self,
        *,
        core_version: str = CORE_VERSION,
        entry_point_group: str = ENTRY_POINT_GROUP,
        builtin_providers: Iterable[tuple[str, str]] | None = None,
    ) -> None:
        self._core_version = core_version
        self._entry_point_group = entry_point_group
        self._builtin_providers = tuple(BUILTIN_PROVIDERS if builtin_providers is None else builtin_providers)

    def discover(self) -> list[DiscoveredProvider]:
        """Load compatible providers; entry points override builtins of the same name."""

        eps = metadata.entry_points()
        group = eps.select(group=self._entry_point_group)
        discovered: dict[str, DiscoveredProvider] = {}
        for entry_point in sorted(group, key=lambda ep: ep.name):
            self._add(discovered, entry_point)
        for name, value in self._builtin_providers:
            if name in discovered:
                continue
            entry_point = metadata.EntryPoint(name=name, value=value, group=self._entry_point_group)
            self._add(discovered, entry_point)
        return list(discovered.values())

    def _add(self, discovered: dict[str, DiscoveredProvider], entry_point: metadata.EntryPoint) -> None:
        provider = self._load_provider(entry_point)
        found = DiscoveredProvider(
            name=provider.name,
            version=getattr(provider, "version", "0.0.0"),
            min_core=getattr(provider, "min_core", "0.0.0"),
            entry_point=entry_point,
            provider=provider,
        )
        try:
            self._ensure_compatible(found)
        except ProviderCompatibilityError as exc:
            LOG.warning(
                "Skipping provider due to min_core mismatch",
                extra={"provider": found.name, "min_core": found.min_core},
            )
            LOG.debug(str(exc))
            return
        native = tuple(provider.list_native_modules())
        if native:
            LOG.debug("Provider bundles native modules", extra={"provider": found.name, "modules": native})
        discovered[found.name] = found

    def _ensure_compatible(self, provider: DiscoveredProvider) -> None:
        core = _parse_version(self._core_version)
        minimum = _parse_version(provider.min_core)
        if core < minimum:
            raise ProviderCompatibilityError(
                f"Provider '{provider.name}' requires core>={provider.min_core}, found {self._core_version}"
            )

    def _load_provider(self, entry_point: metadata.EntryPoint) -> ServiceProvider:
        try:
            obj = entry_point.load()
        except Exception as exc:
            LOG.exception("Provider import failed", extra={"entry_point": entry_point.value})
            raise ProviderError(f"Failed to load provider '{entry_point.name}'") from exc
        if inspect.isclass(obj):
            return obj()  # type: ignore[call-arg]
        return obj  # type: ignore[return-value]


__all__ = ["BUILTIN_PROVIDERS", "DiscoveredProvider", "ENTRY_POINT_GROUP", "ProviderLoader"]
