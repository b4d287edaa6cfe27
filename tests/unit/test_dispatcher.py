"""Unit tests for Dispatcher: per-request timeout linked with ambient cancellation."""
from __future__ import annotations

import asyncio
import time

import pytest

from fluent_client.application.dispatcher import (
    Dispatcher,
    RequestCancelledError,
    RequestTimedOutError,
    RequestTimedOutOrCancelled,
)
from fluent_client.constants import HttpMethod
from fluent_client.domain.models import MaterializedRequest
from fluent_client.ports.http_client import HttpClientError, HttpClientTimeoutError
from tests.conftest import FakeHttpClient, FakeResponse

REQUEST = MaterializedRequest(method=HttpMethod.GET, uri="/slow", headers={})


def _cancel_after(event: asyncio.Event, seconds: float) -> None:
    asyncio.get_running_loop().call_later(seconds, event.set)


@pytest.mark.asyncio
async def test_send_without_timeout_returns_response():
    client = FakeHttpClient(FakeResponse(204))

    response = await Dispatcher(client).send(REQUEST)

    assert response.status_code == 204
    assert client.sent == [REQUEST]


@pytest.mark.asyncio
async def test_timeout_fires_before_later_ambient_cancellation():
    client = FakeHttpClient(delay_seconds=2.0)
    ambient = asyncio.Event()
    _cancel_after(ambient, 0.5)

    started = time.monotonic()
    with pytest.raises(RequestTimedOutError):
        await Dispatcher(client).send(REQUEST, timeout=0.1, cancellation=ambient)

    assert time.monotonic() - started < 0.45
    assert not ambient.is_set()


@pytest.mark.asyncio
async def test_earlier_ambient_cancellation_is_not_overridden_by_timeout():
    client = FakeHttpClient(delay_seconds=2.0)
    ambient = asyncio.Event()
    _cancel_after(ambient, 0.05)

    started = time.monotonic()
    with pytest.raises(RequestCancelledError):
        await Dispatcher(client).send(REQUEST, timeout=1.0, cancellation=ambient)

    assert time.monotonic() - started < 0.9


@pytest.mark.asyncio
async def test_ambient_cancellation_alone_governs_without_timeout():
    client = FakeHttpClient(delay_seconds=2.0)
    ambient = asyncio.Event()
    _cancel_after(ambient, 0.05)

    with pytest.raises(RequestCancelledError):
        await Dispatcher(client).send(REQUEST, cancellation=ambient)


@pytest.mark.asyncio
async def test_already_cancelled_signal_never_reaches_transport():
    client = FakeHttpClient()
    ambient = asyncio.Event()
    ambient.set()

    with pytest.raises(RequestCancelledError):
        await Dispatcher(client).send(REQUEST, cancellation=ambient)

    assert client.sent == []


@pytest.mark.asyncio
async def test_response_within_timeout_is_returned():
    client = FakeHttpClient(FakeResponse(200), delay_seconds=0.01)

    response = await Dispatcher(client).send(REQUEST, timeout=1.0, cancellation=asyncio.Event())

    assert response.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [HttpClientError("connection refused"), HttpClientTimeoutError("read timeout")])
async def test_transport_errors_propagate_unchanged(error):
    client = FakeHttpClient(raise_on_send=error)

    with pytest.raises(type(error)):
        await Dispatcher(client).send(REQUEST, timeout=1.0)
    with pytest.raises(type(error)):
        await Dispatcher(client).send(REQUEST)

    assert len(client.sent) == 2


@pytest.mark.asyncio
async def test_caller_task_cancellation_propagates():
    client = FakeHttpClient(delay_seconds=2.0)
    task = asyncio.create_task(Dispatcher(client).send(REQUEST, timeout=5.0))
    await asyncio.sleep(0.05)

    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


def test_timeout_and_cancellation_share_a_base_error():
    assert issubclass(RequestTimedOutError, RequestTimedOutOrCancelled)
    assert issubclass(RequestCancelledError, RequestTimedOutOrCancelled)
