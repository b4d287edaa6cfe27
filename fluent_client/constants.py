"""Library-level constants shared across modules."""
from __future__ import annotations

from enum import Enum


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class AuthorizationType(str, Enum):
    """Scheme placed in front of the credential in the Authorization header."""

    Bearer = "Bearer"
    Basic = "Basic"
    Digest = "Digest"
    ApiKey = "ApiKey"
    OAuth = "OAuth"


class ResponseState(str, Enum):
    UNRESOLVED = "UNRESOLVED"
    RESOLVED = "RESOLVED"
    BODY_READ = "BODY_READ"
    REPORTED = "REPORTED"


DEFAULT_CULTURE = "en,en-GB;q=0.9,en-US"
DEFAULT_ACCEPT = "application/json"
DEFAULT_CONTENT_TYPE = "application/json"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/143.0.0.0 Safari/537.36 fluent-client/1.0"
)
