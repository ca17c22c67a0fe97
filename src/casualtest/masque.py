"""Call recording wrappers ("masques").

A masque wraps an inner function and behaves exactly like it, while keeping
a log of the arguments and outcome of every call. Use one wherever a test
needs to check how code it does not control (event systems, callbacks,
handlers) invoked a function.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable


class CallOutcome(str, Enum):
    PENDING = "pending"
    RETURNED = "returned"
    RAISED = "raised"


@dataclass
class CallRecord:
    """One invocation of a masque.

    The record is logged before the inner function runs, so a re-entrant
    call observes it as PENDING. Once the call finishes exactly one of
    ``result`` (RETURNED) or ``error`` (RAISED) is meaningful.
    """

    args: tuple[Any, ...]
    kwargs: dict[str, Any] = field(default_factory=dict)
    result: Any = None
    error: BaseException | None = None
    outcome: CallOutcome = CallOutcome.PENDING

    @property
    def returned(self) -> bool:
        return self.outcome is CallOutcome.RETURNED

    @property
    def raised(self) -> bool:
        return self.outcome is CallOutcome.RAISED


def _noop(*args: Any, **kwargs: Any) -> None:
    return None


class Masque:
    """Callable wrapper that forwards to ``fn`` and logs each call.

    The log is exposed through read-only views (``calls``, ``call_count``,
    ``last_call``); reading them never counts as a call.
    """

    def __init__(self, fn: Callable[..., Any] | None = None):
        if fn is not None:
            # copies fn.__dict__ too, so our own state is assigned afterwards
            functools.update_wrapper(self, fn)
        self._fn = fn if fn is not None else _noop
        self._calls: list[CallRecord] = []

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        record = CallRecord(args=args, kwargs=dict(kwargs))
        self._calls.append(record)
        try:
            record.result = self._fn(*args, **kwargs)
        except BaseException as error:
            record.error = error
            record.outcome = CallOutcome.RAISED
            raise
        record.outcome = CallOutcome.RETURNED
        return record.result

    @property
    def inner(self) -> Callable[..., Any]:
        return self._fn

    @property
    def calls(self) -> tuple[CallRecord, ...]:
        """Snapshot of the call log, oldest first."""
        return tuple(self._calls)

    @property
    def call_count(self) -> int:
        return len(self._calls)

    @property
    def called(self) -> bool:
        return bool(self._calls)

    @property
    def last_call(self) -> CallRecord | None:
        return self._calls[-1] if self._calls else None

    def reset(self) -> None:
        """Forget every logged call."""
        self._calls.clear()

    def __repr__(self) -> str:
        name = getattr(self._fn, "__qualname__", repr(self._fn))
        return f"<Masque of {name}: {len(self._calls)} call(s)>"


def masque(fn: Callable[..., Any] | None = None) -> Masque:
    """Wrap ``fn`` (a no-op when omitted) in a call-recording masque."""
    return Masque(fn)


record = masque
