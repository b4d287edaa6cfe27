"""Request builder: turns a RequestSpec snapshot into a MaterializedRequest.

Pure function; no I/O. Header precedence, later wins on the same
case-insensitive name:

    transport defaults (applied by the client) -> User-Agent -> Accept
    -> Accept-Language / Lang -> explicit headers -> Authorization
"""
from __future__ import annotations

from urllib.parse import quote

from fluent_client.domain.headers import HeaderMap
from fluent_client.domain.models import (
    InvalidRequestConfiguration,
    MaterializedRequest,
    RequestSpec,
)
from fluent_client.domain.query import format_query_value
from fluent_client.domain.serialization import serialize


def build_uri(spec: RequestSpec, default_path: str | None = None) -> str:
    path = spec.path if spec.path is not None else default_path
    if path is None:
        raise InvalidRequestConfiguration("request path is not set and no default path was supplied")

    if spec.path_parameters:
        encoded = [quote(format_query_value(value), safe="") for value in spec.path_parameters]
        try:
            path = path.format(*encoded)
        except (IndexError, KeyError) as exc:
            raise InvalidRequestConfiguration(
                f"path template {path!r} does not match {len(encoded)} path parameter(s)"
            ) from exc

    query = spec.query.encode()
    if not query:
        return path
    if "?" not in path:
        return f"{path}?{query}"
    # the path already carries its own query
    if path.endswith(("?", "&")):
        return f"{path}{query}"
    return f"{path}&{query}"


def build_headers(spec: RequestSpec) -> HeaderMap:
    headers = HeaderMap()
    headers["User-Agent"] = spec.user_agent
    headers["Accept"] = spec.accepted_content_type
    headers["Accept-Language"] = spec.culture
    headers["Lang"] = spec.culture
    headers.update(spec.headers)
    if spec.authorization is not None:
        headers["Authorization"] = spec.authorization.header_value
    return headers


def materialize(spec: RequestSpec, default_path: str | None = None) -> MaterializedRequest:
    uri = build_uri(spec, default_path)
    headers = build_headers(spec)

    content: bytes | None = None
    media_type: str | None = None
    if spec.body is not None:
        content = serialize(spec.body)
        media_type = headers.get("Content-Type", spec.content_type)
        headers["Content-Type"] = media_type
    else:
        headers.pop("Content-Type", None)

    return MaterializedRequest(
        method=spec.method,
        uri=uri,
        headers=headers.to_dict(),
        content=content,
        media_type=media_type,
    )
