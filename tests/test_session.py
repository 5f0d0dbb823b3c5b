"""Tests for property resolution and the session factory registry."""

from __future__ import annotations

import asyncio
import gc
import importlib.metadata as metadata

import pytest

from dbprovider.config import AppConfig, ConnectionProfileConfig
from dbprovider.providers import ProviderNotFoundError, ProviderRegistry
from dbprovider.session import SessionFactory, SessionFactoryRegistry, resolve_properties
from examples.providers.memory_provider import MemoryServiceProvider


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def no_entry_points(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(metadata, "entry_points", lambda: metadata.EntryPoints(()))


def _registry(provider: MemoryServiceProvider | None = None) -> ProviderRegistry:
    registry = ProviderRegistry()
    registry.register(provider or MemoryServiceProvider())
    return registry


def test_resolve_implementation_name_returns_defaults() -> None:
    properties = resolve_properties("mysql", registry=_registry())

    assert properties["host"] == "localhost"
    assert properties["port"] == 3306
    assert properties["database"] == "test"
    assert properties["implementation"] == "mysql"


def test_resolve_mapping_merges_over_defaults_and_normalizes() -> None:
    overrides = {"mysql_host": "db1", "database": "orders"}

    properties = resolve_properties(overrides, registry=_registry())

    assert properties["host"] == "db1"
    assert properties["database"] == "orders"
    assert properties["port"] == 3306
    assert "mysql_host" not in properties
    assert overrides == {"mysql_host": "db1", "database": "orders"}


def test_resolve_profile_from_config() -> None:
    config = AppConfig(
        profiles=[ConnectionProfileConfig(name="Reporting", host="replica", user="report", database="stats")]
    )

    properties = resolve_properties("Reporting", registry=_registry(), config=config)

    assert properties["host"] == "replica"
    assert properties["user"] == "report"
    assert properties["database"] == "stats"
    assert properties["implementation"] == "mysql"


def test_resolve_unknown_name_raises() -> None:
    with pytest.raises(ProviderNotFoundError):
        resolve_properties("Nope", registry=_registry(), config=AppConfig())


@pytest.mark.anyio
async def test_open_caches_factory_by_provider_key() -> None:
    provider = MemoryServiceProvider()
    factories = SessionFactoryRegistry(_registry(provider))

    first = await factories.open({"implementation": "memory", "user": "app"})
    second = await factories.open({"implementation": "memory", "user": "app"})
    other = await factories.open({"implementation": "memory", "user": "admin"})

    assert first is second
    assert other is not first
    assert provider.connect_calls == 2
    assert first.pool.connected is True
    assert factories.get(first.key) is first
    assert len(factories.factories) == 2


@pytest.mark.anyio
async def test_concurrent_opens_share_one_connect() -> None:
    provider = MemoryServiceProvider(delay=0.01)
    factories = SessionFactoryRegistry(_registry(provider))

    results = await asyncio.gather(*(factories.open("memory") for _ in range(5)))

    assert provider.connect_calls == 1
    assert all(result is results[0] for result in results)


@pytest.mark.anyio
async def test_failed_open_raises_original_error_and_is_not_cached() -> None:
    error = ConnectionRefusedError("refused")
    provider = MemoryServiceProvider(fail_with=error)
    factories = SessionFactoryRegistry(_registry(provider))

    with pytest.raises(ConnectionRefusedError) as excinfo:
        await factories.open("memory")

    assert excinfo.value is error
    assert factories.factories == ()

    provider.fail_with = None
    factory = await factories.open("memory")

    assert provider.connect_calls == 2
    assert factory.pool.connected is True


@pytest.mark.anyio
async def test_failed_open_delivers_error_to_every_waiter() -> None:
    error = ConnectionRefusedError("refused")
    provider = MemoryServiceProvider(fail_with=error, delay=0.01)
    factories = SessionFactoryRegistry(_registry(provider))

    results = await asyncio.gather(*(factories.open("memory") for _ in range(3)), return_exceptions=True)

    assert provider.connect_calls == 1
    assert all(result is error for result in results)


@pytest.mark.anyio
async def test_close_all_closes_pools() -> None:
    factories = SessionFactoryRegistry(_registry())
    first = await factories.open({"implementation": "memory", "user": "a"})
    second = await factories.open({"implementation": "memory", "user": "b"})

    await factories.close_all()

    assert first.pool.closed is True
    assert second.pool.closed is True
    assert factories.factories == ()
    await factories.close("unknown-key")


@pytest.mark.anyio
async def test_open_uses_configured_profile() -> None:
    config = AppConfig(profiles=[ConnectionProfileConfig(name="Scratch", implementation="memory", user="dev")])
    factories = SessionFactoryRegistry(_registry(), config=config)

    factory = await factories.open("Scratch")

    assert factory.properties["user"] == "dev"
    assert factory.properties["database"] == "scratch"
    assert factory.provider.name == "memory"


def test_factory_repr_hides_credentials() -> None:
    factory = SessionFactory(
        key="mysql://db1:3306+a<secret>",
        properties={"password": "secret"},
        provider=MemoryServiceProvider(),
        pool=None,
    )

    assert "secret" not in repr(factory)


@pytest.mark.anyio
async def test_failed_open_with_cancelled_waiters_reports_nothing() -> None:
    loop = asyncio.get_running_loop()
    reported: list[dict[str, object]] = []
    previous = loop.get_exception_handler()
    loop.set_exception_handler(lambda _loop, context: reported.append(context))
    provider = MemoryServiceProvider(fail_with=ConnectionRefusedError("refused"), delay=0.01)
    factories = SessionFactoryRegistry(_registry(provider))
    try:
        waiter = asyncio.ensure_future(factories.open("memory"))
        await asyncio.sleep(0)
        waiter.cancel()
        await asyncio.sleep(0.05)
        gc.collect()
    finally:
        loop.set_exception_handler(previous)

    assert waiter.cancelled()
    assert provider.connect_calls == 1
    assert factories.factories == ()
    assert not [context for context in reported if "never retrieved" in str(context.get("message"))]
