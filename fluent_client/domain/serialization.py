"""JSON serialization for request bodies and response payloads.

Bodies are written with enums rendered as member names. Payloads are read
tolerating trailing commas, matching property names case-insensitively and
accepting enum members by name or by value; typed validation is done by a
pydantic TypeAdapter so any annotation pydantic understands can be a target.
"""
from __future__ import annotations

import dataclasses
import json
import types
import typing
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Any, Mapping, TypeVar, Union, get_args, get_origin
from uuid import UUID

from pydantic import BaseModel, TypeAdapter, ValidationError
from typing_extensions import is_typeddict

T = TypeVar("T")


class DeserializationError(ValueError):
    """Raised when a payload cannot be turned into the requested type."""


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.name
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, BaseModel):
        return _to_jsonable(value.model_dump(by_alias=True))
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Mapping):
        return {str(key): _to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_jsonable(item) for item in value]
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if hasattr(value, "__dict__"):
        return {key: _to_jsonable(item) for key, item in vars(value).items() if not key.startswith("_")}
    raise TypeError(f"object of type {type(value).__name__} is not JSON serializable")


def serialize(value: Any) -> bytes:
    return json.dumps(_to_jsonable(value), ensure_ascii=False).encode("utf-8")


def _strip_trailing_commas(text: str) -> str:
    out: list[str] = []
    in_string = False
    escaped = False
    length = len(text)
    for index, char in enumerate(text):
        if in_string:
            out.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == ",":
            lookahead = index + 1
            while lookahead < length and text[lookahead].isspace():
                lookahead += 1
            if lookahead < length and text[lookahead] in "}]":
                continue
        out.append(char)
    return "".join(out)


def _enum_member(enum_type: type[Enum], raw: str) -> Any:
    lowered = raw.lower()
    for member in enum_type:
        if member.name.lower() == lowered:
            return member
    return raw


def _field_lookup(target: type) -> dict[str, tuple[str, Any]]:
    lookup: dict[str, tuple[str, Any]] = {}
    if issubclass(target, BaseModel):
        for name, info in target.model_fields.items():
            key = info.alias or name
            lookup[key.lower()] = (key, info.annotation)
            lookup.setdefault(name.lower(), (key, info.annotation))
    elif is_typeddict(target):
        for name, annotation in typing.get_type_hints(target).items():
            lookup[name.lower()] = (name, annotation)
    else:
        hints = typing.get_type_hints(target)
        for f in dataclasses.fields(target):
            lookup[f.name.lower()] = (f.name, hints.get(f.name, Any))
    return lookup


def _align(data: Any, annotation: Any) -> Any:
    """Rename keys and map enum names so the payload matches the target's spelling."""
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        for arg in get_args(annotation):
            if arg is type(None):
                continue
            aligned = _align(data, arg)
            if aligned is not data:
                return aligned
        return data
    if origin is typing.Annotated:
        return _align(data, get_args(annotation)[0])
    if origin in (list, set, frozenset, tuple) and isinstance(data, list):
        args = get_args(annotation)
        item_type = args[0] if args else Any
        return [_align(item, item_type) for item in data]
    if origin is dict and isinstance(data, dict):
        args = get_args(annotation)
        value_type = args[1] if len(args) == 2 else Any
        return {key: _align(item, value_type) for key, item in data.items()}
    if not isinstance(annotation, type):
        return data
    if issubclass(annotation, Enum) and isinstance(data, str):
        return _enum_member(annotation, data)
    if isinstance(data, dict) and (
        issubclass(annotation, BaseModel) or dataclasses.is_dataclass(annotation) or is_typeddict(annotation)
    ):
        lookup = _field_lookup(annotation)
        aligned: dict[str, Any] = {}
        for key, item in data.items():
            match = lookup.get(str(key).lower())
            if match is None:
                aligned[key] = item
            else:
                aligned[match[0]] = _align(item, match[1])
        return aligned
    return data


@lru_cache(maxsize=256)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def deserialize(text: str, target: type[T] | Any) -> T | None:
    """Parse JSON text into `target`. A literal `null` yields None without validation."""
    try:
        data = json.loads(_strip_trailing_commas(text))
    except json.JSONDecodeError as exc:
        raise DeserializationError(f"response is not valid JSON: {exc}") from exc
    name = getattr(target, "__name__", str(target))
    if data is None:
        return None
    try:
        return _adapter(target).validate_python(_align(data, target))
    except ValidationError as exc:
        raise DeserializationError(f"failed to deserialize response into {name}: {exc}") from exc
    except (TypeError, NameError) as exc:
        # unresolvable annotations on the target surface as NameError
        raise DeserializationError(f"cannot deserialize into {name}: {exc}") from exc
