"""Builds the httpx-backed transport from Settings: base URL, client timeout, redirect policy."""
from __future__ import annotations

import httpx

from fluent_client.config.settings import Settings
from fluent_client.infrastructure.http.httpx_client import HttpxHttpClient
from fluent_client.ports.http_client import AbstractHttpClient


def create_http_client(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AbstractHttpClient:
    """`transport` replaces the network, e.g. httpx.MockTransport or httpx.ASGITransport in tests."""
    async_client = httpx.AsyncClient(
        base_url=settings.base_url,
        timeout=settings.client_timeout_seconds,
        transport=transport,
    )
    return HttpxHttpClient(async_client, follow_redirects=settings.follow_redirects)
