"""Expectations and their matcher sets.

``expect(value)`` classifies the value into a ``Category`` once, then picks
the matcher class for that category from ``_EXPECTATIONS``. Every matcher
produces an ``AssertionResult``; failed results are raised as
``ExpectationError``. Matchers return the expectation so they can be chained::

    expect(3).is_greater_than(2).is_less_than(4)
"""

from __future__ import annotations

import itertools
import numbers
import types
from collections.abc import Set
from enum import Enum
from typing import Any

from casualtest.assertions.base import AssertionResult
from casualtest.errors import ExpectationError, MatcherUsageError
from casualtest.masque import Masque

DEFAULT_PRECISION = 1e-3


class Category(str, Enum):
    NUMERIC = "numeric"
    MASQUE = "masque"
    FUNCTION = "function"
    SEQUENCE = "sequence"
    SET = "set"
    GENERIC = "generic"


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


def _type_name(kind: Any) -> str:
    if isinstance(kind, types.UnionType):
        kind = kind.__args__
    if isinstance(kind, tuple):
        return " | ".join(_type_name(k) for k in kind)
    return getattr(kind, "__name__", repr(kind))


def classify(value: Any) -> Category:
    """Return the matcher category for ``value``.

    Strings and mappings are GENERIC: only lists and tuples get
    the sequence matchers.
    """
    if _is_number(value):
        return Category.NUMERIC
    if isinstance(value, Masque):
        return Category.MASQUE
    if callable(value):
        return Category.FUNCTION
    if isinstance(value, (list, tuple)):
        return Category.SEQUENCE
    if isinstance(value, Set):
        return Category.SET
    return Category.GENERIC


class Expectation:
    """Matchers available for every value."""

    category = Category.GENERIC

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"

    def _enforce(self, result: AssertionResult) -> Expectation:
        if not result.passed:
            raise ExpectationError(result)
        return self

    def _check(self, name: str, passed: bool, failure: str) -> Expectation:
        message = failure if not passed else f"{name} passed"
        return self._enforce(AssertionResult(name=name, passed=passed, message=message))

    def equals(self, other: Any) -> Expectation:
        return self._check(
            f"equals:{other!r}", self.value == other, f"{self.value!r} != {other!r}"
        )

    def is_(self, other: Any) -> Expectation:
        return self._check(
            f"is:{other!r}", self.value is other, f"{self.value!r} is not {other!r}"
        )

    def is_not(self, other: Any) -> Expectation:
        return self._check(
            f"is_not:{other!r}", self.value is not other, f"{self.value!r} is {other!r}"
        )

    def is_instance_of(
        self, kind: type | types.UnionType | tuple[type, ...]
    ) -> Expectation:
        if isinstance(kind, types.UnionType):
            kinds = kind.__args__
        else:
            kinds = kind if isinstance(kind, tuple) else (kind,)
        if not kinds or not all(isinstance(k, type) for k in kinds):
            raise MatcherUsageError(f"{kind!r} is not a type or a tuple of types")
        return self._check(
            f"is_instance_of:{_type_name(kind)}",
            isinstance(self.value, kind),
            f'Value is an instance of "{type(self.value).__name__}", '
            f'but expected "{_type_name(kind)}"',
        )

    def yields(self, count: int) -> Expectation:
        """Consume the value as an iterable and check it produced ``count`` items.

        At most ``count + 1`` items are drawn, so an endless iterator fails
        instead of hanging.
        """
        if not isinstance(count, int) or isinstance(count, bool) or count < 0:
            raise MatcherUsageError(f"count must be a non-negative int, got {count!r}")
        try:
            iterator = iter(self.value)
        except TypeError as exc:
            raise MatcherUsageError(f"The value {self.value!r} is not iterable") from exc

        produced = sum(1 for _ in itertools.islice(iterator, count + 1))
        if produced > count:
            failure = f"Value yielded more than {count} items."
        else:
            failure = f"Value yielded only {produced} items of an expected {count}"
        return self._check(f"yields:{count}", produced == count, failure)


class NumericExpectation(Expectation):
    category = Category.NUMERIC

    def _typecheck(self, other: Any) -> None:
        if not _is_number(other):
            raise MatcherUsageError(
                f"The argument, {other!r}, is not a number and can't be compared "
                "with the value of the expectation"
            )

    def is_greater_than(self, other: Any) -> Expectation:
        self._typecheck(other)
        return self._check(
            f"is_greater_than:{other!r}",
            self.value > other,
            f"{self.value!r} is not greater than {other!r}",
        )

    def is_less_than(self, other: Any) -> Expectation:
        self._typecheck(other)
        return self._check(
            f"is_less_than:{other!r}",
            self.value < other,
            f"{self.value!r} is not less than {other!r}",
        )

    def is_close_to(self, other: Any, precision: float = DEFAULT_PRECISION) -> Expectation:
        self._typecheck(other)
        if not _is_number(precision) or precision < 0:
            raise MatcherUsageError(
                f"precision must be a non-negative number, got {precision!r}"
            )
        return self._check(
            f"is_close_to:{other!r}",
            abs(self.value - other) <= precision,
            f"{self.value!r} and {other!r} are different by more than {precision!r}",
        )


class FunctionExpectation(Expectation):
    category = Category.FUNCTION

    def to_throw(self, expected: type[BaseException] = Exception) -> Expectation:
        """Call the wrapped function with no arguments and require it to raise.

        A nested ``ExpectationError`` is re-raised untouched so the inner
        failure keeps its identity.
        """
        if not (isinstance(expected, type) and issubclass(expected, BaseException)):
            raise MatcherUsageError(f"{expected!r} is not an exception type")

        name = f"to_throw:{expected.__name__}"
        try:
            self.value()
        except ExpectationError:
            raise
        except expected:
            return self._check(name, True, "")
        except Exception as error:
            return self._check(
                name,
                False,
                f"Expected an exception of type {expected.__name__}, but caught "
                f"an error with type {type(error).__name__}: {error}",
            )
        return self._check(
            name, False, "Expected function to throw an error, but it did not."
        )


class MasqueExpectation(FunctionExpectation):
    category = Category.MASQUE

    value: Masque

    def was_called(self) -> Expectation:
        return self._check(
            "was_called", self.value.called, "The function was never called."
        )

    def was_called_once(self) -> Expectation:
        count = self.value.call_count
        return self._check(
            "was_called_once",
            count == 1,
            f"The function should have been called one time, but was called {count} time(s).",
        )

    def was_called_times(self, times: int) -> Expectation:
        count = self.value.call_count
        return self._check(
            f"was_called_times:{times}",
            count == times,
            f"The function should have been called {times} time(s), but was called {count} time(s).",
        )

    def was_not_called(self) -> Expectation:
        count = self.value.call_count
        return self._check(
            "was_not_called",
            count == 0,
            f"The function should not have been called, but was called {count} time(s).",
        )

    def last_called_with_args(self, *args: Any) -> Expectation:
        name = "last_called_with_args"
        last = self.value.last_call
        if last is None:
            return self._check(name, False, "The function was never called.")
        if len(last.args) != len(args):
            return self._check(
                name,
                False,
                f"Argument list lengths do not match: got {last.args!r} but expected {args!r}",
            )
        for index, (actual, wanted) in enumerate(zip(last.args, args)):
            if actual != wanted:
                return self._check(
                    name,
                    False,
                    f"Argument value at index {index} does not match: "
                    f"got {last.args!r} but expected {args!r}",
                )
        return self._check(name, True, "")

    def last_called_with(self, *args: Any, **kwargs: Any) -> Expectation:
        self.last_called_with_args(*args)
        last = self.value.last_call
        return self._check(
            "last_called_with",
            last.kwargs == kwargs,
            f"Keyword arguments do not match: got {last.kwargs!r} but expected {kwargs!r}",
        )

    def last_returned(self, value: Any) -> Expectation:
        name = f"last_returned:{value!r}"
        last = self.value.last_call
        if last is None:
            return self._check(name, False, "The function was never called.")
        if not last.returned:
            return self._check(
                name, False, f"The last call did not return; its outcome was {last.outcome.value}."
            )
        return self._check(
            name, last.result == value, f"The last call returned {last.result!r}, not {value!r}"
        )

    def last_raised(self, kind: type[BaseException] = Exception) -> Expectation:
        name = f"last_raised:{_type_name(kind)}"
        last = self.value.last_call
        if last is None:
            return self._check(name, False, "The function was never called.")
        return self._check(
            name,
            last.raised and isinstance(last.error, kind),
            f"Expected the last call to raise {_type_name(kind)}, "
            f"but its outcome was {last.outcome.value} ({last.error!r})",
        )


class SequenceExpectation(Expectation):
    category = Category.SEQUENCE

    def _typecheck(self, other: Any) -> None:
        if not isinstance(other, (list, tuple)):
            raise MatcherUsageError(f"The value {other!r} is not a list or tuple")

    def all_equal(self, other: list[Any] | tuple[Any, ...]) -> Expectation:
        self._typecheck(other)
        name = "all_equal"
        if len(self.value) != len(other):
            return self._check(
                name,
                False,
                f"The sequences have different lengths; expected a sequence of length "
                f"{len(other)} but found a sequence of length {len(self.value)}",
            )
        for index, (a, b) in enumerate(zip(self.value, other)):
            if a != b:
                return self._check(
                    name,
                    False,
                    f"The sequence values differ at index {index} ({a!r} != {b!r})",
                )
        return self._check(name, True, "")


class SetExpectation(Expectation):
    category = Category.SET

    def has(self, item: Any) -> Expectation:
        return self._check(
            f"has:{item!r}", item in self.value, f"Set does not include {item!r}"
        )


_EXPECTATIONS: dict[Category, type[Expectation]] = {
    Category.NUMERIC: NumericExpectation,
    Category.MASQUE: MasqueExpectation,
    Category.FUNCTION: FunctionExpectation,
    Category.SEQUENCE: SequenceExpectation,
    Category.SET: SetExpectation,
    Category.GENERIC: Expectation,
}


def expect(value: Any) -> Expectation:
    """Wrap ``value`` in the expectation matching its category."""
    return _EXPECTATIONS[classify(value)](value)
