"""Fluent HTTP request construction and response assertions on top of httpx."""
from fluent_client.application.dispatcher import (
    Dispatcher,
    RequestCancelledError,
    RequestTimedOutError,
    RequestTimedOutOrCancelled,
)
from fluent_client.application.fluent_client import FluentClient
from fluent_client.application.fluent_request import FluentHttpRequest
from fluent_client.assertions.execution import AssertionChain, AssertionFailedError, AssertionScope
from fluent_client.assertions.expectations import Expectation, check, expect
from fluent_client.assertions.response_assertions import (
    ResponseAssertions,
    ResponseConsumedError,
    should,
)
from fluent_client.composition import create_fluent_client
from fluent_client.config.settings import Settings
from fluent_client.constants import AuthorizationType, HttpMethod
from fluent_client.domain.models import (
    Authorization,
    InvalidRequestConfiguration,
    MaterializedRequest,
    MissingCredentials,
    RequestSpec,
)
from fluent_client.domain.query import QuerySpec
from fluent_client.domain.serialization import DeserializationError
from fluent_client.ports.http_client import HttpClientError, HttpClientTimeoutError

__all__ = [
    "AssertionChain",
    "AssertionFailedError",
    "AssertionScope",
    "Authorization",
    "AuthorizationType",
    "DeserializationError",
    "Dispatcher",
    "Expectation",
    "FluentClient",
    "FluentHttpRequest",
    "HttpClientError",
    "HttpClientTimeoutError",
    "HttpMethod",
    "InvalidRequestConfiguration",
    "MaterializedRequest",
    "MissingCredentials",
    "QuerySpec",
    "RequestCancelledError",
    "RequestSpec",
    "RequestTimedOutError",
    "RequestTimedOutOrCancelled",
    "ResponseAssertions",
    "ResponseConsumedError",
    "Settings",
    "check",
    "create_fluent_client",
    "expect",
    "should",
]
