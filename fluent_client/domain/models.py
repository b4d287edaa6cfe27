"""Domain models: request configuration, authorization and materialized requests."""
from __future__ import annotations

import base64
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from fluent_client.constants import (
    DEFAULT_ACCEPT,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_CULTURE,
    DEFAULT_USER_AGENT,
    AuthorizationType,
    HttpMethod,
)
from fluent_client.domain.headers import HeaderMap
from fluent_client.domain.query import QuerySpec


class InvalidRequestConfiguration(ValueError):
    """Raised at configuration time when a request cannot be built as described."""


class MissingCredentials(InvalidRequestConfiguration):
    """Raised when authorize() gets neither username+password nor a token."""


@dataclass(frozen=True)
class Authorization:
    """Scheme and credential for the Authorization header (value object)."""

    scheme: str
    credential: str

    @property
    def header_value(self) -> str:
        return f"{self.scheme} {self.credential}"

    @staticmethod
    def resolve(
        username: str | None = None,
        password: str | None = None,
        token: str | None = None,
        scheme: AuthorizationType | str | None = None,
    ) -> "Authorization":
        """Username and password win over a token; an explicit scheme overrides either default."""
        if username is not None and password is not None:
            credential = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
            default_scheme = AuthorizationType.Basic
        elif token is not None:
            credential = token
            default_scheme = AuthorizationType.Bearer
        else:
            raise MissingCredentials("authorize requires either username and password or a token")

        chosen = scheme if scheme is not None else default_scheme
        if isinstance(chosen, AuthorizationType):
            chosen = chosen.value
        return Authorization(scheme=str(chosen), credential=credential)


def _as_seconds(timeout: float | timedelta | None) -> float | None:
    if timeout is None:
        return None
    seconds = timeout.total_seconds() if isinstance(timeout, timedelta) else float(timeout)
    if seconds <= 0:
        raise InvalidRequestConfiguration(f"timeout must be positive, got {seconds}")
    return seconds


@dataclass
class RequestSpec:
    """Mutable request configuration. Pure data: nothing is encoded or sent here.

    Once dispatch begins the spec is sealed; any further assignment raises
    InvalidRequestConfiguration.
    """

    method: HttpMethod = HttpMethod.GET
    path: str | None = None
    path_parameters: tuple[Any, ...] = ()
    query: QuerySpec = field(default_factory=QuerySpec)
    headers: HeaderMap = field(default_factory=HeaderMap)
    body: Any = None
    content_type: str = DEFAULT_CONTENT_TYPE
    accepted_content_type: str = DEFAULT_ACCEPT
    culture: str = DEFAULT_CULTURE
    user_agent: str = DEFAULT_USER_AGENT
    authorization: Authorization | None = None
    timeout: float | None = None
    sealed: bool = field(default=False, repr=False, compare=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "sealed", False):
            raise InvalidRequestConfiguration(
                f"cannot change '{name}': the request was already dispatched"
            )
        if name == "timeout":
            value = _as_seconds(value)
        elif name == "method" and not isinstance(value, HttpMethod):
            value = HttpMethod(str(value).upper())
        object.__setattr__(self, name, value)

    def ensure_mutable(self) -> None:
        if self.sealed:
            raise InvalidRequestConfiguration("the request was already dispatched")

    def seal(self) -> None:
        object.__setattr__(self, "sealed", True)


@dataclass(frozen=True)
class MaterializedRequest:
    """Fully resolved request, ready for the transport."""

    method: HttpMethod
    uri: str
    headers: dict[str, str]
    content: bytes | None = None
    media_type: str | None = None
