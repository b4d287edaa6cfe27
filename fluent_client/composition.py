"""Composition root: build the fluent client and its transport from settings.

This is the only module that knows both the httpx factory and FluentClient;
everything below it sees the AbstractHttpClient port.
"""
from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from fluent_client.application.fluent_client import FluentClient
from fluent_client.config.settings import Settings
from fluent_client.core import SERVICE_NAME
from fluent_client.infrastructure.http.factory import create_http_client


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def create_fluent_client(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FluentClient:
    """Caller owns lifecycle: `await client.close()` or `async with create_fluent_client() as client`."""
    _settings = settings or Settings()
    http_client = create_http_client(_settings, transport=transport)
    _log(
        "fluent_client_created",
        base_url=_settings.base_url,
        request_timeout_seconds=_settings.request_timeout_seconds,
    )
    return FluentClient(http_client, _settings)
