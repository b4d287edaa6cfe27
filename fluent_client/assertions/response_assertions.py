"""Assertions over a pending HTTP response.

`should(pending)` takes ownership of a not-yet-awaited response (any
awaitable resolving to an HttpResponse) or of an already-resolved one. The
response is awaited once and cached:

    UNRESOLVED -> RESOLVED -> BODY_READ -> REPORTED

Every operation releases the response when it finishes, whatever the
outcome, and returns the assertions object so checks can be chained. The body
survives release only if an earlier operation read it.
"""
from __future__ import annotations

import inspect
from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import Any, AsyncIterator, Awaitable, Callable, TypeVar, Union

from loguru import logger

from fluent_client.assertions.execution import AssertionChain, AssertionScope
from fluent_client.constants import ResponseState
from fluent_client.core import SERVICE_NAME
from fluent_client.domain.serialization import deserialize
from fluent_client.ports.http_client import HttpResponse, HttpResponseReleasedError

T = TypeVar("T")

PendingResponse = Union[Awaitable[HttpResponse], HttpResponse]

IDENTIFIER = "http-response"


class ResponseConsumedError(RuntimeError):
    """Raised when the body is needed but the response was already released unread."""


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def _status_name(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown"


def _split_status_and_reason(
    expected_status: int | str | None, because: str, because_args: tuple[Any, ...]
) -> tuple[int | None, str, tuple[Any, ...]]:
    # succeed("because ...", arg) is the status-less form
    if isinstance(expected_status, str):
        args = (because, *because_args) if because != "" or because_args else ()
        return None, expected_status, args
    return expected_status, because, because_args


class ResponseAssertions:
    def __init__(self, pending: PendingResponse) -> None:
        self._pending = pending
        self._response: HttpResponse | None = None
        self._body: str | None = None
        self._state = ResponseState.UNRESOLVED

    @property
    def state(self) -> ResponseState:
        return self._state

    @property
    def response(self) -> HttpResponse | None:
        return self._response

    async def _resolve(self) -> HttpResponse:
        if self._response is None:
            pending = self._pending
            self._pending = None
            if pending is None:
                raise ResponseConsumedError("the pending response already failed to resolve")
            if inspect.isawaitable(pending):
                pending = await pending
            self._response = pending
            self._state = ResponseState.RESOLVED
        return self._response

    @asynccontextmanager
    async def _consume(self) -> AsyncIterator[HttpResponse]:
        response = await self._resolve()
        try:
            yield response
        finally:
            if not response.is_closed:
                try:
                    await response.aclose()
                except Exception as exc:
                    logger.warning("response close failed: {}", exc)

    async def _read_body(self, response: HttpResponse) -> str:
        if self._body is None:
            try:
                self._body = await response.read_text()
            except HttpResponseReleasedError as exc:
                raise ResponseConsumedError(
                    "the response was released before its body was read; verify the body first"
                ) from exc
            self._state = ResponseState.BODY_READ
        return self._body

    def _evaluate(
        self,
        check: str,
        response: HttpResponse,
        condition: bool,
        because: str,
        because_args: tuple[Any, ...],
        message: str,
        **fields: Any,
    ) -> AssertionChain:
        self._state = ResponseState.REPORTED
        _log("response_asserted", check=check, status=response.status_code, succeeded=bool(condition))
        return (
            AssertionChain(IDENTIFIER)
            .because(because, *because_args)
            .for_condition(condition)
            .fail_with(message, **fields)
        )

    async def succeed(
        self,
        expected_status: int | str | None = None,
        because: str = "",
        *because_args: Any,
    ) -> "ResponseAssertions":
        """Assert a 2xx status, or exactly `expected_status` when one is given.

        `succeed("because ...")` and `succeed(201, "because ...")` are both accepted.
        """
        expected, because, because_args = _split_status_and_reason(expected_status, because, because_args)
        if expected is not None:
            return await self.have_status_code(expected, because, *because_args)

        async with self._consume() as response:
            self._evaluate(
                "succeed",
                response,
                response.is_success,
                because,
                because_args,
                "Expected HTTP response to be successful{reason}, but found {status} ({phrase}).",
                status=response.status_code,
                phrase=response.reason_phrase,
            )
        return self

    async def fail(self, because: str = "", *because_args: Any) -> "ResponseAssertions":
        async with self._consume() as response:
            self._evaluate(
                "fail",
                response,
                not response.is_success,
                because,
                because_args,
                "Expected HTTP response to fail{reason}, but found {status} ({phrase}).",
                status=response.status_code,
                phrase=response.reason_phrase,
            )
        return self

    async def have_status_code(
        self, expected_status: int, because: str = "", *because_args: Any
    ) -> "ResponseAssertions":
        expected = int(expected_status)
        async with self._consume() as response:
            self._evaluate(
                "have_status_code",
                response,
                response.status_code == expected,
                because,
                because_args,
                "Expected HTTP response to have status code {expected} ({expected_name}){reason}, "
                "but found {status} ({phrase}).",
                expected=expected,
                expected_name=_status_name(expected),
                status=response.status_code,
                phrase=response.reason_phrase,
            )
        return self

    async def satisfy(
        self,
        body_type: type[T] | Any,
        verification: Callable[[T], Any],
        because: str = "",
        *because_args: Any,
    ) -> "ResponseAssertions":
        """Deserialize the body into `body_type` and run `verification` against it.

        Failures reported inside the block (via `expect`/`check`, or a plain
        `assert`) are collected in order and reported as one failure.
        Deserialization errors are not assertion failures and propagate.
        """
        if not callable(verification):
            # still awaited and released
            async with self._consume():
                pass
            raise TypeError("verification must be a callable taking the deserialized body")

        type_name = getattr(body_type, "__name__", str(body_type))
        async with self._consume() as response:
            raw = await self._read_body(response)
            if not (raw and raw.strip()):
                self._evaluate(
                    "satisfy",
                    response,
                    False,
                    because,
                    because_args,
                    "Expected HTTP response body to be deserializable to {type_name}{reason}, but it was empty.",
                    type_name=type_name,
                )
                return self

            body = deserialize(raw, body_type)

            with AssertionScope() as scope:
                try:
                    outcome = verification(body)
                    if inspect.isawaitable(outcome):
                        await outcome
                except AssertionError as exc:
                    scope.add_failure(str(exc) or type(exc).__name__)
                failures = scope.discard()

            self._evaluate(
                "satisfy",
                response,
                not failures,
                because,
                because_args,
                "Expected {context} to match inspector{reason}, but the inspector was not satisfied:\n{failures}",
                failures="\n".join(failures),
            )
        return self


def should(pending: PendingResponse) -> ResponseAssertions:
    """Entry point: `await should(client.get("/items")).succeed()`."""
    return ResponseAssertions(pending)
