"""Case-insensitive header mapping used by request configuration."""
from __future__ import annotations

from typing import Iterable, Iterator, Mapping, MutableMapping


class HeaderMap(MutableMapping[str, str]):
    """Header names compare case-insensitively; the last write keeps its own spelling."""

    def __init__(self, headers: Mapping[str, str] | Iterable[tuple[str, str]] | None = None) -> None:
        self._store: dict[str, tuple[str, str]] = {}
        if headers:
            self.update(headers)

    def __setitem__(self, name: str, value: str) -> None:
        self._store[name.lower()] = (name, value)

    def __getitem__(self, name: str) -> str:
        return self._store[name.lower()][1]

    def __delitem__(self, name: str) -> None:
        del self._store[name.lower()]

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._store

    def copy(self) -> "HeaderMap":
        return HeaderMap(self.items())

    def to_dict(self) -> dict[str, str]:
        return {name: value for name, value in self._store.values()}

    def __repr__(self) -> str:
        return f"HeaderMap({self.to_dict()!r})"
