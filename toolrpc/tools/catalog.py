"""Assemble the method registry from configuration."""

from __future__ import annotations

import httpx
from loguru import logger

from toolrpc.api.rpc.dispatcher import Dispatcher
from toolrpc.api.rpc.registry import MethodRegistry
from toolrpc.config.schema import Config
from toolrpc.tools.outlook import OutlookTools
from toolrpc.tools.token_store import InMemoryTokenStore, TokenStore
from toolrpc.tools.weather import WeatherTools


def build_registry(
    config: Config,
    *,
    token_store: TokenStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> MethodRegistry:
    """Register every enabled tool family; the caller freezes the result."""
    registry = MethodRegistry()
    if config.weather.enabled:
        weather = WeatherTools(
            config.weather.api_key,
            base_url=config.weather.base_url,
            units=config.weather.units,
            timeout=config.weather.timeout_seconds,
            transport=transport,
        )
        registry.register_all(weather.descriptors())
    if config.outlook.enabled:
        outlook = OutlookTools(
            token_store if token_store is not None else InMemoryTokenStore(config.outlook.tokens),
            graph_base_url=config.outlook.graph_base_url,
            timeout=config.outlook.timeout_seconds,
            transport=transport,
        )
        registry.register_all(outlook.descriptors())
    logger.info("Registered {} RPC methods: {}", len(registry), ", ".join(registry.names))
    return registry


def build_dispatcher(
    config: Config,
    *,
    token_store: TokenStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Dispatcher:
    """Build a dispatcher over a frozen registry."""
    registry = build_registry(config, token_store=token_store, transport=transport)
    return Dispatcher(
        registry,
        protocol_version=config.server.protocol_version,
        server_name=config.server.server_name,
    )
