"""HTTP client port: contract for sending materialized requests.

The dispatcher talks to this Protocol only; the httpx adapter in
infrastructure/http implements it. Requests cross it fully materialized.
"""
from __future__ import annotations

from typing import Mapping, Protocol, runtime_checkable

from fluent_client.domain.models import MaterializedRequest


class HttpClientError(Exception):
    """Base for failures raised by a transport adapter."""


class HttpClientTimeoutError(HttpClientError):
    """Raised when the transport's own timeout elapses."""


class HttpResponseReleasedError(HttpClientError):
    """Raised when a body is read from a response that was closed before its content was loaded."""


@runtime_checkable
class HttpResponse(Protocol):
    """Minimal view of an HTTP response whose body has not been read yet."""

    @property
    def status_code(self) -> int: ...

    @property
    def reason_phrase(self) -> str: ...

    @property
    def headers(self) -> Mapping[str, str]: ...

    @property
    def url(self) -> str: ...

    @property
    def is_success(self) -> bool: ...

    @property
    def is_closed(self) -> bool: ...

    async def read_text(self) -> str:
        """Read the whole body as text.

        A body already loaded is returned even after close; otherwise a closed
        response raises HttpResponseReleasedError.
        """
        ...

    async def aclose(self) -> None:
        """Release the underlying connection/stream. Safe to call more than once."""
        ...


@runtime_checkable
class AbstractHttpClient(Protocol):
    """Sends materialized requests and hands back unread, streaming responses."""

    async def send(self, request: MaterializedRequest) -> HttpResponse:
        """Raise HttpClientTimeoutError when the transport deadline passes, HttpClientError for anything else."""
        ...

    async def close(self) -> None:
        """Close the underlying connection pool."""
        ...
