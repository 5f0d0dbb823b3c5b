"""Sample provider implementing the contract for manual and automated tests."""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Sequence

from dbprovider.providers import ConnectCallback, ServiceProvider


class MemoryPool:
    """Pool handle that records its lifecycle instead of opening sockets."""

    def __init__(self, properties: Mapping[str, Any]) -> None:
        self.properties = dict(properties)
        self.connected = False
        self.closed = False

    def close(self) -> None:
        self.closed = True


class MemoryServiceProvider(ServiceProvider):
    """Minimal provider used to validate discovery and session caching."""

    name = "memory"
    version = "0.0.1"
    min_core = "0.1.0"

    def __init__(self, *, fail_with: BaseException | None = None, delay: float = 0.0) -> None:
        self.fail_with = fail_with
        self.delay = delay
        self.connect_calls = 0

    def get_default_configuration(self) -> dict[str, Any]:
        return {"implementation": "memory", "database": "scratch", "user": "", "password": ""}

    def connect_sync(self, config: Mapping[str, Any]) -> MemoryPool:
        self.connect_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        pool = MemoryPool(config)
        pool.connected = True
        return pool

    async def connect(self, config: Mapping[str, Any], on_complete: ConnectCallback) -> None:
        self.connect_calls += 1
        pool = MemoryPool(config)
        await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            on_complete(self.fail_with, pool)
            return
        pool.connected = True
        on_complete(None, pool)

    def get_provider_key(self, config: Mapping[str, Any]) -> str:
        return f"memory://{config.get('database')}+{config.get('user')}<{config.get('password')}>"

    def list_native_modules(self) -> Sequence[str]:
        return []
