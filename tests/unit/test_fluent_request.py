"""Unit tests for FluentHttpRequest and FluentClient over httpx.MockTransport and the fake port."""
from __future__ import annotations

import asyncio
import base64
import json
from datetime import timedelta

import httpx
import pytest
from pydantic import BaseModel

from fluent_client.application.dispatcher import RequestCancelledError, RequestTimedOutError
from fluent_client.assertions.expectations import expect
from fluent_client.assertions.response_assertions import ResponseConsumedError, should
from fluent_client.constants import AuthorizationType, HttpMethod
from fluent_client.domain.models import InvalidRequestConfiguration, MissingCredentials
from fluent_client.domain.serialization import DeserializationError
from fluent_client.ports.http_client import HttpClientError
from tests.conftest import FakeResponse, json_response


class Basket(BaseModel):
    id: int
    items: list[str]


def _recording(response: httpx.Response, seen: list[httpx.Request]):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return response

    return handler


def test_query_from_object_builds_encoded_uri(client_factory):
    client = client_factory(_recording(httpx.Response(200), []))

    request = client.request().with_path("/").query({"page": 1, "limit": 2, "phrase": "%x"})

    assert request.uri == "/?page=1&limit=2&phrase=%25x"


def test_query_from_client_without_path_uses_default_path(client_factory):
    client = client_factory(_recording(httpx.Response(200), []))

    request = client.query({"page": 1, "limit": 2, "phrase": "%x"})

    assert request.uri == "?page=1&limit=2&phrase=%25x"


def test_with_parameter_appends_duplicates(client_factory):
    client = client_factory(_recording(httpx.Response(200), []))

    request = client.query({"page": 1, "limit": 2, "phrase": "%x"}).with_parameter("page", 2).with_parameter("page", 3)

    assert request.uri == "?page=1&limit=2&phrase=%25x&page=2&page=3"


@pytest.mark.asyncio
async def test_query_reaches_transport_with_duplicates(client_factory):
    seen: list[httpx.Request] = []
    client = client_factory(_recording(httpx.Response(200), seen))

    await should(client.with_parameter("page", 1).with_parameter("page", 2).get("/items")).succeed()

    assert seen[0].url.path == "/items"
    assert seen[0].url.params.get_list("page") == ["1", "2"]


@pytest.mark.asyncio
async def test_post_sends_json_body_and_default_headers(client_factory, settings):
    seen: list[httpx.Request] = []
    client = client_factory(_recording(httpx.Response(200), seen))

    await should(client.post("/v1/api/basket", {"cartItem": "esp32-dev-board"})).succeed()

    sent = seen[0]
    assert sent.method == "POST"
    assert str(sent.url) == "https://lepo.co/v1/api/basket"
    assert json.loads(sent.content) == {"cartItem": "esp32-dev-board"}
    assert sent.headers["content-type"] == "application/json"
    assert sent.headers["accept"] == settings.accepted_content_type
    assert sent.headers["user-agent"] == settings.user_agent
    assert sent.headers["accept-language"] == settings.culture
    assert sent.headers["lang"] == settings.culture


@pytest.mark.asyncio
async def test_get_sends_no_content(client_factory):
    seen: list[httpx.Request] = []
    client = client_factory(_recording(httpx.Response(200), seen))

    await should(client.get("/items")).succeed()

    assert seen[0].content == b""
    assert "content-type" not in seen[0].headers


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "verb,method",
    [
        ("get", "GET"),
        ("head", "HEAD"),
        ("options", "OPTIONS"),
        ("post", "POST"),
        ("put", "PUT"),
        ("patch", "PATCH"),
        ("delete", "DELETE"),
    ],
)
async def test_every_verb_sets_its_method(client_factory, verb, method):
    seen: list[httpx.Request] = []
    client = client_factory(_recording(httpx.Response(204), seen))

    await should(getattr(client, verb)("/resource")).succeed(204)

    assert seen[0].method == method


@pytest.mark.asyncio
async def test_with_body_is_kept_when_verb_gets_no_body(client_factory):
    seen: list[httpx.Request] = []
    client = client_factory(_recording(httpx.Response(200), seen))

    await should(client.with_body({"hello": "world"}).put("/greeting")).succeed()

    assert json.loads(seen[0].content) == {"hello": "world"}


@pytest.mark.asyncio
async def test_bearer_authorization_reaches_transport(client_factory):
    seen: list[httpx.Request] = []
    client = client_factory(_recording(httpx.Response(200), seen))

    await should(client.authorize(token="abc123").with_header("Authorization", "Bearer shadow").post("/basket")).succeed()

    assert seen[0].headers["authorization"] == "Bearer abc123"


@pytest.mark.asyncio
async def test_basic_authorization_reaches_transport(client_factory):
    seen: list[httpx.Request] = []
    client = client_factory(_recording(httpx.Response(200), seen))

    await should(client.authorize(username="lepo", password="pass").get("/me")).succeed()

    assert seen[0].headers["authorization"] == "Basic " + base64.b64encode(b"lepo:pass").decode()


def test_authorize_without_credentials_fails_at_configuration_time(client_factory):
    client = client_factory(_recording(httpx.Response(200), []))

    with pytest.raises(MissingCredentials):
        client.authorize()


def test_authorize_with_explicit_scheme(client_factory):
    client = client_factory(_recording(httpx.Response(200), []))

    request = client.authorize(token="key", scheme=AuthorizationType.ApiKey)

    assert request.materialize().headers["Authorization"] == "ApiKey key"


@pytest.mark.asyncio
async def test_send_with_response_type_deserializes(client_factory):
    client = client_factory(_recording(json_response(200, {"ID": 7, "Items": ["a", "b"]}), []))

    basket = await client.get("/basket/7", response_type=Basket)

    assert basket == Basket(id=7, items=["a", "b"])


@pytest.mark.asyncio
async def test_send_with_response_type_null_body_fails(client_factory):
    client = client_factory(_recording(json_response(200, None), []))

    with pytest.raises(DeserializationError, match="Failed to deserialize the response content."):
        await client.post("/basket", response_type=Basket)


@pytest.mark.asyncio
async def test_send_with_response_type_malformed_body_fails(client_factory):
    client = client_factory(_recording(httpx.Response(200, content=b"<html>"), []))

    with pytest.raises(DeserializationError):
        await client.request().with_method(HttpMethod.GET).with_path("/").send(Basket)


@pytest.mark.asyncio
async def test_satisfy_through_the_client(client_factory):
    client = client_factory(_recording(json_response(200, {"id": 42, "items": ["x"]}), []))

    await should(client.authorize(token="abc123").post("/v1/api/basket")).satisfy(
        Basket,
        lambda basket: expect(basket.id, "id").to_be(42),
        "because the server returned the expected JSON body",
    )


@pytest.mark.asyncio
async def test_satisfy_reads_a_body_httpx_already_loaded(client_factory):
    client = client_factory(lambda request: httpx.Response(200, json={"id": 42, "items": []}))

    assertions = should(client.get("/v1/api/basket/42"))
    await assertions.satisfy(Basket, lambda basket: expect(basket.id, "id").to_be(42))
    await assertions.succeed()
    await assertions.satisfy(Basket, lambda basket: expect(basket.items, "items").to_be([]))


class _UnreadBody(httpx.AsyncByteStream):
    async def __aiter__(self):
        yield b'{"id": 42, "items": []}'


@pytest.mark.asyncio
async def test_satisfy_after_streamed_body_was_released_unread(client_factory):
    client = client_factory(lambda request: httpx.Response(200, stream=_UnreadBody()))

    assertions = should(client.get("/v1/api/basket/42"))
    await assertions.succeed()

    with pytest.raises(ResponseConsumedError):
        await assertions.satisfy(Basket, lambda basket: None)


@pytest.mark.asyncio
async def test_configuration_after_dispatch_is_rejected(client_factory):
    client = client_factory(_recording(httpx.Response(200), []))
    request = client.request().with_path("/items")

    response = await request.send()
    await response.aclose()

    with pytest.raises(InvalidRequestConfiguration):
        request.with_parameter("page", 2)
    with pytest.raises(InvalidRequestConfiguration):
        request.with_body({"late": True})
    assert request.spec.sealed


@pytest.mark.asyncio
async def test_request_timeout_is_enforced(client_factory):
    async def slow(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(2.0)
        return httpx.Response(200)

    client = client_factory(slow)
    request = client.request().with_timeout(timedelta(milliseconds=100))

    with pytest.raises(RequestTimedOutError):
        await should(request.get("/slow")).succeed()


@pytest.mark.asyncio
async def test_transport_failure_is_mapped(client_factory):
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = client_factory(refuse)

    with pytest.raises(HttpClientError, match="connection refused"):
        await client.get("/down")


@pytest.mark.asyncio
async def test_reason_phrase_comes_from_transport(client_factory):
    client = client_factory(_recording(httpx.Response(403), []))

    with pytest.raises(AssertionError, match=r"but found 403 \(Forbidden\)"):
        await should(client.delete("/humanity")).succeed()


@pytest.mark.asyncio
async def test_client_context_manager_closes_transport(fake_client_factory):
    client, http_client = fake_client_factory()
    async with client:
        await should(client.get("/")).succeed()

    assert http_client.closed


@pytest.mark.asyncio
async def test_materialized_request_reaches_port(fake_client_factory):
    client, http_client = fake_client_factory(FakeResponse(201))

    await should(
        client.request()
        .with_path("/v1/api/basket/{0}/items")
        .with_path_parameters("a b")
        .with_header("X-Trace", "t-1")
        .with_content_type("application/vnd.lepo+json")
        .post(path="/v1/api/basket/{0}/items", body={"cartItem": "x"})
    ).succeed(201)

    sent = http_client.sent[0]
    assert sent.method is HttpMethod.POST
    assert sent.uri == "/v1/api/basket/a%20b/items"
    assert sent.headers["X-Trace"] == "t-1"
    assert sent.headers["Content-Type"] == "application/vnd.lepo+json"
    assert sent.media_type == "application/vnd.lepo+json"


@pytest.mark.asyncio
async def test_ambient_cancellation_through_client(fake_client_factory):
    client, http_client = fake_client_factory(delay_seconds=1.0)
    cancellation = asyncio.Event()
    asyncio.get_running_loop().call_later(0.05, cancellation.set)

    with pytest.raises(RequestCancelledError):
        await client.get("/slow", cancellation=cancellation)

    assert len(http_client.sent) == 1


@pytest.mark.asyncio
async def test_default_timeout_comes_from_settings(fake_client_factory, settings):
    settings.request_timeout_seconds = 0.05
    client, _ = fake_client_factory(delay_seconds=1.0)

    with pytest.raises(RequestTimedOutError):
        await client.get("/slow")


@pytest.mark.asyncio
async def test_response_headers_keep_repeats_and_case_insensitive_lookup(client_factory):
    client = client_factory(
        lambda request: httpx.Response(
            200,
            headers=[("Set-Cookie", "a=1"), ("Set-Cookie", "b=2"), ("Content-Type", "application/json")],
        )
    )

    response = await client.get("/cookies")
    try:
        assert response.headers["content-type"] == "application/json"
        assert response.headers.get_list("set-cookie") == ["a=1", "b=2"]
    finally:
        await response.aclose()
