from __future__ import annotations

import asyncio
import json
from http import HTTPStatus
from typing import Any, Callable

import httpx
import pytest

from fluent_client.application.fluent_client import FluentClient
from fluent_client.composition import create_fluent_client
from fluent_client.config.settings import Settings
from fluent_client.domain.models import MaterializedRequest
from fluent_client.ports.http_client import HttpResponseReleasedError

BASE_URL = "https://lepo.co"


class FakeResponse:
    """Implements HttpResponse for tests; records reads and closes."""

    def __init__(
        self,
        status_code: int = 200,
        body: str = "",
        *,
        reason_phrase: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._status_code = status_code
        self._body = body
        self._reason_phrase = reason_phrase if reason_phrase is not None else HTTPStatus(status_code).phrase
        self._headers = headers or {}
        self._closed = False
        self._loaded = False
        self.read_count = 0
        self.close_count = 0

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def reason_phrase(self) -> str:
        return self._reason_phrase

    @property
    def headers(self) -> dict[str, str]:
        return self._headers

    @property
    def url(self) -> str:
        return f"{BASE_URL}/"

    @property
    def is_success(self) -> bool:
        return 200 <= self._status_code < 300

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def read_text(self) -> str:
        if self._closed and not self._loaded:
            raise HttpResponseReleasedError("stream closed before the body was read")
        self._loaded = True
        self.read_count += 1
        return self._body

    async def aclose(self) -> None:
        self.close_count += 1
        self._closed = True


class FakeHttpClient:
    """Implements AbstractHttpClient for tests; records every request it is asked to send."""

    def __init__(
        self,
        response: FakeResponse | None = None,
        *,
        delay_seconds: float = 0.0,
        raise_on_send: Exception | None = None,
    ) -> None:
        self.response = response or FakeResponse()
        self.sent: list[MaterializedRequest] = []
        self.closed = False
        self._delay_seconds = delay_seconds
        self._raise_on_send = raise_on_send

    async def send(self, request: MaterializedRequest) -> FakeResponse:
        self.sent.append(request)
        if self._delay_seconds:
            await asyncio.sleep(self._delay_seconds)
        if self._raise_on_send is not None:
            raise self._raise_on_send
        return self.response

    async def close(self) -> None:
        self.closed = True


def json_response(status_code: int, payload: Any) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(payload).encode(),
        headers={"Content-Type": "application/json"},
    )


async def pending(response: FakeResponse) -> FakeResponse:
    """Wrap a fake response in a not-yet-awaited coroutine."""
    return response


@pytest.fixture()
def settings() -> Settings:
    return Settings(base_url=BASE_URL)


@pytest.fixture()
async def client_factory(settings: Settings):
    """Builds FluentClients over httpx.MockTransport; closed after the test."""
    clients: list[FluentClient] = []

    def _create(handler: Callable[[httpx.Request], Any]) -> FluentClient:
        client = create_fluent_client(settings, transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _create
    for client in clients:
        await client.close()


@pytest.fixture()
def fake_client_factory(settings: Settings):
    def _create(response: FakeResponse | None = None, **kwargs: Any) -> tuple[FluentClient, FakeHttpClient]:
        http_client = FakeHttpClient(response, **kwargs)
        return FluentClient(http_client, settings), http_client

    return _create
