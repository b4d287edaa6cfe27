"""Query parameters: ordered multiset of (key, value) pairs."""
from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping
from urllib.parse import quote

from pydantic import BaseModel


def format_query_value(value: Any) -> str:
    """Render a single value the way it appears in a URL before percent-encoding."""
    if value is None:
        return ""
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _public_fields(obj: Any) -> Iterable[tuple[str, Any]]:
    if isinstance(obj, Mapping):
        return [(str(key), value) for key, value in obj.items()]
    if isinstance(obj, BaseModel):
        # python mode keeps enum members so they render by name
        return list(obj.model_dump(by_alias=True).items())
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return [(f.name, getattr(obj, f.name)) for f in dataclasses.fields(obj)]
    if isinstance(obj, (str, bytes)) or not hasattr(obj, "__dict__"):
        raise TypeError(f"cannot read query parameters from {type(obj).__name__}")
    return [(key, value) for key, value in vars(obj).items() if not key.startswith("_")]


class QuerySpec:
    """Query parameters in insertion order. Adding a key again appends, never overwrites."""

    def __init__(self, pairs: Iterable[tuple[str, Any]] | None = None) -> None:
        self._pairs: list[tuple[str, Any]] = []
        for key, value in pairs or ():
            self.add(key, value)

    def add(self, key: str, value: Any = None) -> "QuerySpec":
        if isinstance(value, (list, tuple)):
            for item in value:
                self._pairs.append((key, item))
        else:
            self._pairs.append((key, value))
        return self

    def extend_from(self, obj: Any) -> "QuerySpec":
        for key, value in _public_fields(obj):
            self.add(key, value)
        return self

    @property
    def pairs(self) -> tuple[tuple[str, Any], ...]:
        return tuple(self._pairs)

    def copy(self) -> "QuerySpec":
        clone = QuerySpec()
        clone._pairs = list(self._pairs)
        return clone

    def encode(self) -> str:
        """Percent-encode every key and value on its own and join them with '&'."""
        return "&".join(
            f"{quote(key, safe='')}={quote(format_query_value(value), safe='')}"
            for key, value in self._pairs
        )

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __bool__(self) -> bool:
        return bool(self._pairs)

    def __repr__(self) -> str:
        return f"QuerySpec({self._pairs!r})"
