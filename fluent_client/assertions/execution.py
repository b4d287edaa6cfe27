"""Assertion reporting: conditions, "because" clauses and scoped failure collection.

Outside any scope a failed condition raises AssertionFailedError right away,
which is what pytest expects. Inside an AssertionScope failures are appended
to the scope instead; on exit the scope raises them as one error (or hands
them to an enclosing scope) unless they were discarded first.
"""
from __future__ import annotations

from contextvars import ContextVar, Token
from types import TracebackType
from typing import Any

_current_scope: ContextVar["AssertionScope | None"] = ContextVar("fluent_client_assertion_scope", default=None)


class AssertionFailedError(AssertionError):
    """A recorded assertion failure."""


def format_reason(because: str = "", *because_args: Any) -> str:
    """Render a because clause as it is spliced into a failure message (leading space included)."""
    if not because:
        return ""
    text = because.format(*because_args) if because_args else because
    text = text.strip()
    if not text:
        return ""
    if not text.lower().startswith("because"):
        text = f"because {text}"
    return f" {text}"


def report_failure(message: str) -> None:
    scope = _current_scope.get()
    if scope is None:
        raise AssertionFailedError(message)
    scope.add_failure(message)


class AssertionScope:
    """Collects failures raised while it is active instead of raising them one by one."""

    def __init__(self) -> None:
        self._failures: list[str] = []
        self._token: Token | None = None

    @staticmethod
    def current() -> "AssertionScope | None":
        return _current_scope.get()

    @property
    def failures(self) -> list[str]:
        return list(self._failures)

    @property
    def succeeded(self) -> bool:
        return not self._failures

    def add_failure(self, message: str) -> None:
        self._failures.append(message)

    def discard(self) -> list[str]:
        """Return the collected failures and forget them, so exit will not report them."""
        failures, self._failures = self._failures, []
        return failures

    def __enter__(self) -> "AssertionScope":
        self._token = _current_scope.set(self)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._token is not None:
            _current_scope.reset(self._token)
            self._token = None
        if exc_type is None and self._failures:
            report_failure("\n".join(self.discard()))


class AssertionChain:
    """One check: `because(...)`, then `for_condition(...)`, then `fail_with(...)`.

    Message templates are formatted with `{reason}` (the because clause),
    `{context}` (the subject identifier) and any extra keyword fields.
    """

    def __init__(self, identifier: str = "object") -> None:
        self.identifier = identifier
        self._reason = ""
        self._condition = True
        self._succeeded = True

    def because(self, because: str = "", *because_args: Any) -> "AssertionChain":
        self._reason = format_reason(because, *because_args)
        return self

    def for_condition(self, condition: bool) -> "AssertionChain":
        self._condition = bool(condition)
        return self

    def fail_with(self, message: str, **fields: Any) -> "AssertionChain":
        if self._condition:
            return self
        self._succeeded = False
        report_failure(message.format(reason=self._reason, context=self.identifier, **fields))
        return self

    @property
    def succeeded(self) -> bool:
        return self._succeeded
