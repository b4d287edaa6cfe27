"""FluentClient: starts fluent request chains over an injected AbstractHttpClient.

Every chain gets a fresh RequestSpec seeded with the configured defaults
(User-Agent, Accept, culture, content type). Verb helpers are one-shot chains
and return the pending response without awaiting it, so they can be handed
straight to `should(...)`.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable

from loguru import logger

from fluent_client.application.dispatcher import Dispatcher
from fluent_client.application.fluent_request import FluentHttpRequest
from fluent_client.config.settings import Settings
from fluent_client.constants import AuthorizationType
from fluent_client.domain.models import RequestSpec
from fluent_client.ports.http_client import AbstractHttpClient


class FluentClient:
    def __init__(self, http_client: AbstractHttpClient, settings: Settings | None = None) -> None:
        self._http_client = http_client
        self._settings = settings or Settings()
        self._dispatcher = Dispatcher(http_client)

    @property
    def settings(self) -> Settings:
        return self._settings

    def request(self) -> FluentHttpRequest:
        spec = RequestSpec(
            content_type=self._settings.content_type,
            accepted_content_type=self._settings.accepted_content_type,
            culture=self._settings.culture,
            user_agent=self._settings.user_agent,
        )
        return FluentHttpRequest(
            self._dispatcher,
            spec,
            default_path=self._settings.default_path,
            default_timeout=self._settings.request_timeout_seconds,
        )

    def with_body(self, body: Any) -> FluentHttpRequest:
        return self.request().with_body(body)

    def authorize(
        self,
        username: str | None = None,
        password: str | None = None,
        token: str | None = None,
        scheme: AuthorizationType | str | None = None,
    ) -> FluentHttpRequest:
        return self.request().authorize(username, password, token, scheme)

    def query(self, parameters: Any) -> FluentHttpRequest:
        return self.request().query(parameters)

    def with_parameter(self, key: str, value: Any = None) -> FluentHttpRequest:
        return self.request().with_parameter(key, value)

    def get(self, path: str = "", *, response_type: Any = None, cancellation: asyncio.Event | None = None) -> Awaitable[Any]:
        return self.request().get(path, response_type=response_type, cancellation=cancellation)

    def head(self, path: str = "", *, response_type: Any = None, cancellation: asyncio.Event | None = None) -> Awaitable[Any]:
        return self.request().head(path, response_type=response_type, cancellation=cancellation)

    def options(self, path: str = "", *, response_type: Any = None, cancellation: asyncio.Event | None = None) -> Awaitable[Any]:
        return self.request().options(path, response_type=response_type, cancellation=cancellation)

    def post(
        self,
        path: str = "",
        body: Any = None,
        *,
        response_type: Any = None,
        cancellation: asyncio.Event | None = None,
    ) -> Awaitable[Any]:
        return self.request().post(path, body, response_type=response_type, cancellation=cancellation)

    def put(
        self,
        path: str = "",
        body: Any = None,
        *,
        response_type: Any = None,
        cancellation: asyncio.Event | None = None,
    ) -> Awaitable[Any]:
        return self.request().put(path, body, response_type=response_type, cancellation=cancellation)

    def patch(
        self,
        path: str = "",
        body: Any = None,
        *,
        response_type: Any = None,
        cancellation: asyncio.Event | None = None,
    ) -> Awaitable[Any]:
        return self.request().patch(path, body, response_type=response_type, cancellation=cancellation)

    def delete(
        self,
        path: str = "",
        body: Any = None,
        *,
        response_type: Any = None,
        cancellation: asyncio.Event | None = None,
    ) -> Awaitable[Any]:
        return self.request().delete(path, body, response_type=response_type, cancellation=cancellation)

    async def close(self) -> None:
        try:
            await self._http_client.close()
        except Exception as exc:
            logger.warning("http client close failed: {}", exc)

    async def __aenter__(self) -> "FluentClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
