"""httpx adapter for the AbstractHttpClient port; responses stay streamed until a caller reads them."""
from __future__ import annotations

import httpx
from loguru import logger

from fluent_client.domain.models import MaterializedRequest
from fluent_client.ports.http_client import (
    AbstractHttpClient,
    HttpClientError,
    HttpClientTimeoutError,
    HttpResponse,
    HttpResponseReleasedError,
)


class _HttpxResponseAdapter:
    """Wraps a streamed httpx.Response; the body is loaded on the first read_text()."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def reason_phrase(self) -> str:
        return self._response.reason_phrase

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def url(self) -> str:
        return str(self._response.url)

    @property
    def is_success(self) -> bool:
        return self._response.is_success

    @property
    def is_closed(self) -> bool:
        return self._response.is_closed

    async def read_text(self) -> str:
        try:
            await self._response.aread()
        except (httpx.StreamClosed, httpx.StreamConsumed) as exc:
            raise HttpResponseReleasedError(f"body of {self.url} was released before it was read") from exc
        except httpx.TimeoutException as exc:
            raise HttpClientTimeoutError(f"timeout while reading body from {self.url}") from exc
        except (httpx.HTTPError, httpx.StreamError) as exc:
            raise HttpClientError(f"failed to read body from {self.url}: {exc}") from exc
        return self._response.text

    async def aclose(self) -> None:
        await self._response.aclose()

    def __repr__(self) -> str:
        return f"<HttpResponse [{self.status_code} {self.reason_phrase}]>"


class HttpxHttpClient(AbstractHttpClient):
    """Sends MaterializedRequests through a shared httpx.AsyncClient.

    Responses are opened in streaming mode; the body is read only when a
    caller asks for it, and the caller owns closing the response.
    """

    def __init__(self, client: httpx.AsyncClient, *, follow_redirects: bool = True) -> None:
        self._client = client
        self._follow_redirects = follow_redirects

    async def send(self, request: MaterializedRequest) -> HttpResponse:
        target = f"{request.method.value} {request.uri}"
        try:
            httpx_request = self._client.build_request(
                request.method.value,
                request.uri,
                headers=request.headers,
                content=request.content,
            )
            response = await self._client.send(
                httpx_request,
                stream=True,
                follow_redirects=self._follow_redirects,
            )
        except httpx.TimeoutException as exc:
            raise HttpClientTimeoutError(f"timeout while sending {target}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise HttpClientError(f"http request failed for {target}: {exc}") from exc

        logger.debug(f"Response for {target}: status code: {response.status_code}, headers: {dict(response.headers)}, final URL: {response.url}")
        return _HttpxResponseAdapter(response)

    async def close(self) -> None:
        await self._client.aclose()
