"""Command-line helpers for inspecting providers and checking connections."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from .config import AppConfig, load_config
from .providers import ProviderError, ProviderRegistry, default_registry
from .session import DEFAULT_IMPLEMENTATION, resolve_properties

LOG = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dbprovider", description=__doc__)
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    commands = parser.add_subparsers(dest="command", required=True)

    defaults = commands.add_parser("defaults", help="Print the default properties of a provider.")
    defaults.add_argument("implementation", nargs="?", default=DEFAULT_IMPLEMENTATION)

    commands.add_parser("profiles", help="List connection profiles from config.toml.")

    check = commands.add_parser("check", help="Open a blocking connection and report the outcome.")
    check.add_argument("target", nargs="?", help="Profile name or implementation tag.")
    return parser


def main(
    argv: Sequence[str] | None = None,
    *,
    config: AppConfig | None = None,
    registry: ProviderRegistry | None = None,
) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if config is None:
        config = load_config()
    registry = registry or default_registry()
    try:
        if args.command == "defaults":
            return _print_defaults(registry, args.implementation)
        if args.command == "profiles":
            return _print_profiles(config)
        return _check(registry, config, args.target or config.default_profile or DEFAULT_IMPLEMENTATION)
    except ProviderError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


def _print_defaults(registry: ProviderRegistry, implementation: str) -> int:
    for key, value in registry.get(implementation).get_default_configuration().items():
        print(f"{key} = {value!r}")
    return 0


def _print_profiles(config: AppConfig) -> int:
    for profile in config.profiles:
        marker = "*" if profile.name == config.default_profile else " "
        implementation = profile.implementation or DEFAULT_IMPLEMENTATION
        print(f"{marker} {profile.name} ({implementation})")
    return 0


def _check(registry: ProviderRegistry, config: AppConfig, target: str) -> int:
    properties = resolve_properties(target, registry=registry, config=config)
    provider = registry.get(properties["implementation"])
    try:
        pool = provider.connect_sync(properties)
    except Exception as exc:
        LOG.debug("Blocking connect failed", exc_info=True)
        print(f"Connection failed: {exc}", file=sys.stderr)
        return 1
    try:
        print(f"Connected to {properties.get('database')} via {provider.name}")
    finally:
        close = getattr(pool, "close", None)
        if close is not None:
            close()
    return 0


__all__ = ["main"]
