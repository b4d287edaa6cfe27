"""Dispatcher: sends materialized requests under an optional deadline.

The deadline is linked with the caller's ambient cancellation signal (an
asyncio.Event): the send is abandoned as soon as either fires. Without a
deadline the ambient signal alone governs. Cancelling the calling task
propagates as usual.
"""
from __future__ import annotations

import asyncio
import time
from typing import Any

from loguru import logger

from fluent_client.core import SERVICE_NAME
from fluent_client.domain.models import MaterializedRequest
from fluent_client.ports.http_client import AbstractHttpClient, HttpResponse


class RequestTimedOutOrCancelled(Exception):
    """Base for a send abandoned before the transport answered."""


class RequestTimedOutError(RequestTimedOutOrCancelled):
    """Raised when the per-request timeout elapsed first."""


class RequestCancelledError(RequestTimedOutOrCancelled):
    """Raised when the ambient cancellation signal fired first."""


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


async def _discard(task: asyncio.Task) -> None:
    if not task.done():
        task.cancel()
    try:
        response = await task
    except (asyncio.CancelledError, Exception):
        return
    # The transport answered while we were giving up; nobody owns this response.
    await response.aclose()


class Dispatcher:
    """Sends requests through an injectable AbstractHttpClient. No retries."""

    def __init__(self, client: AbstractHttpClient) -> None:
        self._client = client

    async def send(
        self,
        request: MaterializedRequest,
        *,
        timeout: float | None = None,
        cancellation: asyncio.Event | None = None,
    ) -> HttpResponse:
        target = f"{request.method.value} {request.uri}"
        if cancellation is not None and cancellation.is_set():
            _log("request_cancelled", target=target, elapsed_seconds=0.0)
            raise RequestCancelledError(f"{target} was cancelled before it was sent")

        _log("request_dispatched", target=target, timeout=timeout)
        started = time.monotonic()

        if timeout is None and cancellation is None:
            response = await self._client.send(request)
            _log("response_received", target=target, status=response.status_code)
            return response

        send_task = asyncio.ensure_future(self._client.send(request))
        waiters: set[asyncio.Future] = {send_task}
        cancel_task: asyncio.Task | None = None
        if cancellation is not None:
            cancel_task = asyncio.ensure_future(cancellation.wait())
            waiters.add(cancel_task)

        try:
            done, _ = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            await _discard(send_task)
            raise
        finally:
            if cancel_task is not None and not cancel_task.done():
                cancel_task.cancel()

        elapsed = round(time.monotonic() - started, 3)
        if send_task in done:
            response = send_task.result()
            _log("response_received", target=target, status=response.status_code, elapsed_seconds=elapsed)
            return response

        await _discard(send_task)
        if cancel_task is not None and cancel_task in done:
            _log("request_cancelled", target=target, elapsed_seconds=elapsed)
            raise RequestCancelledError(f"{target} was cancelled after {elapsed}s")

        _log("request_timed_out", target=target, timeout=timeout, elapsed_seconds=elapsed)
        raise RequestTimedOutError(f"{target} timed out after {timeout}s")
