"""Session factories: connected pools shared by provider key."""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from .config import AppConfig
from .properties import merge_properties
from .providers import ProviderRegistry, ServiceProvider, default_registry

LOG = logging.getLogger(__name__)

DEFAULT_IMPLEMENTATION = "mysql"


def resolve_properties(
    target: str | Mapping[str, Any],
    *,
    registry: ProviderRegistry | None = None,
    config: AppConfig | None = None,
) -> dict[str, Any]:
    """Merge a profile name, implementation tag or mapping over provider defaults.

    A string names a configured profile when ``config`` has one by that name,
    otherwise it is taken as an implementation tag.
    """

    registry = registry or default_registry()
    if isinstance(target, str):
        if config is not None and config.has_profile(target):
            overrides = config.profile(target).overrides()
        else:
            overrides = {"implementation": target}
    else:
        overrides = dict(target)
    implementation = overrides.get("implementation") or DEFAULT_IMPLEMENTATION
    provider = registry.get(implementation)
    merged = merge_properties(provider.get_default_configuration(), overrides)
    merged["implementation"] = implementation
    return merged


@dataclass(frozen=True, slots=True)
class SessionFactory:
    """Connected pool together with the properties it was opened with."""

    key: str = field(repr=False)
    properties: Mapping[str, Any] = field(repr=False)
    provider: ServiceProvider
    pool: Any

    async def close(self) -> None:
        """Close the pool and wait for its connections to go away."""

        await _close_pool(self.pool)


class SessionFactoryRegistry:
    """Caches session factories by provider key.

    Opens for the same key share one ``provider.connect`` call. Failed
    connects are never cached.
    """

    def __init__(self, registry: ProviderRegistry | None = None, *, config: AppConfig | None = None) -> None:
        self._registry = registry or default_registry()
        self._config = config
        self._factories: dict[str, SessionFactory] = {}
        self._pending: dict[str, asyncio.Task[SessionFactory]] = {}

    @property
    def factories(self) -> tuple[SessionFactory, ...]:
        """Factories currently open."""

        return tuple(self._factories.values())

    def get(self, key: str) -> SessionFactory | None:
        return self._factories.get(key)

    async def open(self, target: str | Mapping[str, Any]) -> SessionFactory:
        """Return the factory for ``target``, connecting it on first use."""

        properties = resolve_properties(target, registry=self._registry, config=self._config)
        provider = self._registry.get(properties["implementation"])
        key = provider.get_provider_key(properties)
        factory = self._factories.get(key)
        if factory is not None:
            return factory
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(self._connect(key, properties, provider))
            self._pending[key] = task
            task.add_done_callback(lambda done: self._forget_pending(key, done))
        return await asyncio.shield(task)

    async def close(self, key: str) -> None:
        """Close and forget the factory for ``key``; unknown keys are ignored."""

        factory = self._factories.pop(key, None)
        if factory is None:
            return
        await factory.close()
        LOG.debug("Closed session factory", extra={"implementation": factory.provider.name})

    async def close_all(self) -> None:
        """Close every open factory."""

        for key in tuple(self._factories):
            await self.close(key)

    async def _connect(
        self,
        key: str,
        properties: Mapping[str, Any],
        provider: ServiceProvider,
    ) -> SessionFactory:
        outcome: asyncio.Future[tuple[BaseException | None, Any]] = asyncio.get_running_loop().create_future()

        def _on_complete(error: BaseException | None, pool: Any) -> None:
            if outcome.done():
                LOG.warning("Provider completed a connect more than once", extra={"provider": provider.name})
                return
            outcome.set_result((error, pool))

        await provider.connect(properties, _on_complete)
        error, pool = await outcome
        if error is not None:
            if pool is not None:
                await _close_pool(pool)
            raise error
        factory = SessionFactory(key=key, properties=dict(properties), provider=provider, pool=pool)
        self._factories[key] = factory
        LOG.debug(
            "Opened session factory",
            extra={"implementation": provider.name, "database": properties.get("database")},
        )
        return factory

    def _forget_pending(self, key: str, task: asyncio.Task[SessionFactory]) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        # Waiters may all have been cancelled; mark the outcome as retrieved.
        if not task.cancelled():
            task.exception()


async def _close_pool(pool: Any) -> None:
    close = getattr(pool, "close", None)
    if close is not None:
        result = close()
        if inspect.isawaitable(result):
            await result
    wait_closed = getattr(pool, "wait_closed", None)
    if wait_closed is not None:
        await wait_closed()


__all__ = [
    "DEFAULT_IMPLEMENTATION",
    "SessionFactory",
    "SessionFactoryRegistry",
    "resolve_properties",
]
