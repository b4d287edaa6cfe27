"""Small expectation helpers for verification blocks.

They report through the active AssertionScope, so inside `satisfy` every
failed expectation is collected and the block keeps running.
"""
from __future__ import annotations

from typing import Any, Callable

from fluent_client.assertions.execution import AssertionChain


def check(condition: bool, message: str, because: str = "", *because_args: Any) -> bool:
    """Record `message` as a failure unless `condition` holds. `{reason}` in the message is optional."""
    template = message if "{reason}" in message else message.rstrip(".") + "{reason}."
    chain = AssertionChain().because(because, *because_args).for_condition(condition)
    chain.fail_with(template.replace("{", "{{").replace("}", "}}").replace("{{reason}}", "{reason}"))
    return chain.succeeded


class Expectation:
    def __init__(self, actual: Any, name: str | None = None) -> None:
        self.actual = actual
        self.name = name or "value"

    def _chain(self, condition: bool, because: str, because_args: tuple[Any, ...]) -> AssertionChain:
        return AssertionChain(self.name).because(because, *because_args).for_condition(condition)

    def to_be(self, expected: Any, because: str = "", *because_args: Any) -> "Expectation":
        self._chain(self.actual == expected, because, because_args).fail_with(
            "Expected {context} to be {expected!r}{reason}, but found {actual!r}.",
            expected=expected,
            actual=self.actual,
        )
        return self

    def not_to_be(self, unexpected: Any, because: str = "", *because_args: Any) -> "Expectation":
        self._chain(self.actual != unexpected, because, because_args).fail_with(
            "Did not expect {context} to be {unexpected!r}{reason}.",
            unexpected=unexpected,
        )
        return self

    def to_be_none(self, because: str = "", *because_args: Any) -> "Expectation":
        self._chain(self.actual is None, because, because_args).fail_with(
            "Expected {context} to be None{reason}, but found {actual!r}.",
            actual=self.actual,
        )
        return self

    def not_to_be_none(self, because: str = "", *because_args: Any) -> "Expectation":
        self._chain(self.actual is not None, because, because_args).fail_with(
            "Expected {context} not to be None{reason}.",
        )
        return self

    def to_contain(self, item: Any, because: str = "", *because_args: Any) -> "Expectation":
        try:
            contained = item in self.actual
        except TypeError:
            contained = False
        self._chain(contained, because, because_args).fail_with(
            "Expected {context} {actual!r} to contain {item!r}{reason}.",
            actual=self.actual,
            item=item,
        )
        return self

    def to_satisfy(
        self,
        predicate: Callable[[Any], bool],
        description: str = "the predicate",
        because: str = "",
        *because_args: Any,
    ) -> "Expectation":
        self._chain(bool(predicate(self.actual)), because, because_args).fail_with(
            "Expected {context} to satisfy {description}{reason}, but found {actual!r}.",
            description=description,
            actual=self.actual,
        )
        return self


def expect(actual: Any, name: str | None = None) -> Expectation:
    return Expectation(actual, name)
