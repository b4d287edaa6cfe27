"""Fluent request builder: accumulates a RequestSpec and dispatches it once.

Chain methods mutate the spec and return the same builder. The spec is
materialized and sealed at dispatch, so configuration cannot change a request
that is already in flight.
"""
from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Any, Mapping, TypeVar, overload

from fluent_client.application.dispatcher import Dispatcher
from fluent_client.constants import AuthorizationType, HttpMethod
from fluent_client.domain.models import Authorization, MaterializedRequest, RequestSpec
from fluent_client.domain.request_builder import build_uri, materialize
from fluent_client.domain.serialization import DeserializationError, deserialize
from fluent_client.ports.http_client import HttpResponse

T = TypeVar("T")


class FluentHttpRequest:
    def __init__(
        self,
        dispatcher: Dispatcher,
        spec: RequestSpec | None = None,
        *,
        default_path: str | None = "",
        default_timeout: float | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._spec = spec if spec is not None else RequestSpec()
        self._default_path = default_path
        self._default_timeout = default_timeout

    @property
    def spec(self) -> RequestSpec:
        """The accumulated configuration; useful for inspecting a request before it is sent."""
        return self._spec

    @property
    def uri(self) -> str:
        return build_uri(self._spec, self._default_path)

    def with_body(self, body: Any) -> "FluentHttpRequest":
        self._spec.body = body
        return self

    def with_method(self, method: HttpMethod | str) -> "FluentHttpRequest":
        self._spec.method = method
        return self

    def with_path(self, path: str) -> "FluentHttpRequest":
        self._spec.path = path
        return self

    def with_path_parameters(self, *values: Any) -> "FluentHttpRequest":
        """Values for `{0}`-style placeholders in the path. Independent of query parameters."""
        self._spec.path_parameters = values
        return self

    def with_header(self, name: str, value: str) -> "FluentHttpRequest":
        self._spec.ensure_mutable()
        self._spec.headers[name] = value
        return self

    def with_headers(self, headers: Mapping[str, str]) -> "FluentHttpRequest":
        self._spec.ensure_mutable()
        self._spec.headers.update(headers)
        return self

    def authorize(
        self,
        username: str | None = None,
        password: str | None = None,
        token: str | None = None,
        scheme: AuthorizationType | str | None = None,
    ) -> "FluentHttpRequest":
        self._spec.authorization = Authorization.resolve(username, password, token, scheme)
        return self

    def query(self, parameters: Any) -> "FluentHttpRequest":
        """Append the public fields of a mapping, pydantic model, dataclass or object."""
        self._spec.ensure_mutable()
        self._spec.query.extend_from(parameters)
        return self

    def with_parameter(self, key: str, value: Any = None) -> "FluentHttpRequest":
        self._spec.ensure_mutable()
        self._spec.query.add(key, value)
        return self

    def with_timeout(self, timeout: float | timedelta | None) -> "FluentHttpRequest":
        self._spec.timeout = timeout
        return self

    def with_culture(self, culture: str) -> "FluentHttpRequest":
        self._spec.culture = culture
        return self

    def with_user_agent(self, user_agent: str) -> "FluentHttpRequest":
        self._spec.user_agent = user_agent
        return self

    def accept(self, content_type: str) -> "FluentHttpRequest":
        self._spec.accepted_content_type = content_type
        return self

    def with_content_type(self, content_type: str) -> "FluentHttpRequest":
        self._spec.content_type = content_type
        return self

    def materialize(self) -> MaterializedRequest:
        return materialize(self._spec, self._default_path)

    async def _dispatch(self, cancellation: asyncio.Event | None) -> HttpResponse:
        request = self.materialize()
        self._spec.seal()
        timeout = self._spec.timeout if self._spec.timeout is not None else self._default_timeout
        return await self._dispatcher.send(request, timeout=timeout, cancellation=cancellation)

    async def _send_as(self, response_type: type[T] | Any, cancellation: asyncio.Event | None) -> T:
        response = await self._dispatch(cancellation)
        try:
            text = await response.read_text()
        finally:
            await response.aclose()
        result = deserialize(text, response_type)
        if result is None:
            raise DeserializationError("Failed to deserialize the response content.")
        return result

    @overload
    async def send(self, response_type: None = None, *, cancellation: asyncio.Event | None = None) -> HttpResponse: ...

    @overload
    async def send(self, response_type: type[T], *, cancellation: asyncio.Event | None = None) -> T: ...

    async def send(self, response_type: Any = None, *, cancellation: asyncio.Event | None = None) -> Any:
        """Send the request.

        Without `response_type` the open response is returned and the caller
        owns closing it (`should(...)` does that). With a type, the body is
        read, the response closed, and the deserialized value returned.
        """
        if response_type is None:
            return await self._dispatch(cancellation)
        return await self._send_as(response_type, cancellation)

    async def _verb(
        self,
        method: HttpMethod,
        path: str,
        body: Any,
        response_type: Any,
        cancellation: asyncio.Event | None,
    ) -> Any:
        self._spec.path = path
        self._spec.method = method
        if body is not None:
            self._spec.body = body
        return await self.send(response_type, cancellation=cancellation)

    async def get(self, path: str = "", *, response_type: Any = None, cancellation: asyncio.Event | None = None) -> Any:
        return await self._verb(HttpMethod.GET, path, None, response_type, cancellation)

    async def head(self, path: str = "", *, response_type: Any = None, cancellation: asyncio.Event | None = None) -> Any:
        return await self._verb(HttpMethod.HEAD, path, None, response_type, cancellation)

    async def options(self, path: str = "", *, response_type: Any = None, cancellation: asyncio.Event | None = None) -> Any:
        return await self._verb(HttpMethod.OPTIONS, path, None, response_type, cancellation)

    async def post(
        self,
        path: str = "",
        body: Any = None,
        *,
        response_type: Any = None,
        cancellation: asyncio.Event | None = None,
    ) -> Any:
        return await self._verb(HttpMethod.POST, path, body, response_type, cancellation)

    async def put(
        self,
        path: str = "",
        body: Any = None,
        *,
        response_type: Any = None,
        cancellation: asyncio.Event | None = None,
    ) -> Any:
        return await self._verb(HttpMethod.PUT, path, body, response_type, cancellation)

    async def patch(
        self,
        path: str = "",
        body: Any = None,
        *,
        response_type: Any = None,
        cancellation: asyncio.Event | None = None,
    ) -> Any:
        return await self._verb(HttpMethod.PATCH, path, body, response_type, cancellation)

    async def delete(
        self,
        path: str = "",
        body: Any = None,
        *,
        response_type: Any = None,
        cancellation: asyncio.Event | None = None,
    ) -> Any:
        return await self._verb(HttpMethod.DELETE, path, body, response_type, cancellation)
