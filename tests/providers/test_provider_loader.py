"""Tests for provider discovery."""

from __future__ import annotations

import importlib.metadata as metadata

import pytest

from dbprovider.mysql import MysqlServiceProvider
from dbprovider.providers import ProviderError, ProviderLoader
from examples.providers.memory_provider import MemoryServiceProvider

ENTRY_POINT = metadata.EntryPoint(
    name="memory",
    value="examples.providers.memory_provider:MemoryServiceProvider",
    group="dbprovider.providers",
)


@pytest.fixture(autouse=True)
def fake_entry_points(monkeypatch: pytest.MonkeyPatch) -> None:
    """Force discovery to use the sample provider."""

    def _entry_points() -> metadata.EntryPoints:
        return metadata.EntryPoints((ENTRY_POINT,))

    monkeypatch.setattr(metadata, "entry_points", _entry_points)


def test_discover_returns_entry_point_and_builtin_providers() -> None:
    loader = ProviderLoader()

    discovered = {found.name: found for found in loader.discover()}

    assert set(discovered) == {"memory", "mysql"}
    assert isinstance(discovered["memory"].provider, MemoryServiceProvider)
    assert discovered["memory"].version == MemoryServiceProvider.version
    assert isinstance(discovered["mysql"].provider, MysqlServiceProvider)
    assert discovered["mysql"].entry_point.value == "dbprovider.mysql:MysqlServiceProvider"


def test_entry_point_overrides_builtin_of_same_name() -> None:
    loader = ProviderLoader(builtin_providers=[("memory", "dbprovider.mysql:MysqlServiceProvider")])

    discovered = loader.discover()

    assert len(discovered) == 1
    assert isinstance(discovered[0].provider, MemoryServiceProvider)


def test_incompatible_provider_is_skipped(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(MemoryServiceProvider, "min_core", "9.9.9")
    loader = ProviderLoader(core_version="0.1.0", builtin_providers=[])

    assert loader.discover() == []


def test_unloadable_provider_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    broken = metadata.EntryPoint(name="broken", value="examples.providers.missing:Nope", group="dbprovider.providers")
    monkeypatch.setattr(metadata, "entry_points", lambda: metadata.EntryPoints((broken,)))
    loader = ProviderLoader(builtin_providers=[])

    with pytest.raises(ProviderError):
        loader.discover()
