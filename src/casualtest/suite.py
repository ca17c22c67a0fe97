"""Suite execution: counting, async test handling and buffered reporting.

Each ``Suite`` is an explicit execution context. Tests register through its
methods, so two suites never share counters even when they run on the same
event loop::

    async def main():
        def body(s):
            s.test("adds", lambda: expect(1 + 1).equals(2))
            s.testasync("sleeps", sleepy_check)

        report = await suite("Arithmetic", body)
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
import traceback
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Iterator

from casualtest.errors import TEST_CODE_FAILURE_HINT, ExpectationError
from casualtest.verbose import get_output_logger

log = logging.getLogger(__name__)

SEPARATOR = "---------------"
BODY_LABEL = "<suite body>"


class SuiteState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    REPORTED = "reported"


class MessageKind(str, Enum):
    INFO = "info"
    ERROR = "error"


class CaseStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"


@dataclass
class Message:
    kind: MessageKind
    payload: str


@dataclass
class CaseOutcome:
    """Outcome of one test attempt.

    ``ERROR`` marks a test code failure; it still counts as failed.
    """

    label: str
    status: CaseStatus
    message: str = ""
    detail: str = ""
    duration_seconds: float = 0.0
    is_async: bool = False

    @property
    def passed(self) -> bool:
        return self.status is CaseStatus.PASSED

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class SuiteReport:
    label: str
    attempts: int
    passed: int
    failed: int
    errors: int
    duration_seconds: float
    outcomes: list[CaseOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "attempts": self.attempts,
            "passed": self.passed,
            "failed": self.failed,
            "errors": self.errors,
            "duration_seconds": self.duration_seconds,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


def _describe(error: BaseException) -> str:
    if isinstance(error, ExpectationError):
        return f"\t{type(error).__name__}: {error}"
    return "".join(
        traceback.format_exception(type(error), error, error.__traceback__)
    ).rstrip()


class Suite:
    """Execution context for one suite run.

    Messages are buffered and only written to ``output`` when the suite
    reports, so concurrently running suites never interleave their output.
    A detached context (used for tests run outside any suite) writes each
    outcome as soon as it is known and is never summarised.
    """

    def __init__(
        self,
        label: str,
        output: logging.Logger | None = None,
        *,
        detached: bool = False,
    ):
        self.label = label
        self.output = output if output is not None else get_output_logger()
        self.detached = detached
        self.state = SuiteState.RUNNING if detached else SuiteState.IDLE
        self.attempts = 0
        self.passed = 0
        self.failed = 0
        self.errors = 0
        self.messages: list[Message] = []
        self.outcomes: list[CaseOutcome] = []
        self._pending: list[asyncio.Future[None]] = []
        self._started_at = time.monotonic()

    def __repr__(self) -> str:
        return (
            f"<Suite {self.label!r} {self.state.value}: "
            f"{self.passed}/{self.attempts} passed, {self.failed} failed>"
        )

    @property
    def pending(self) -> int:
        return len(self._pending)

    def info(self, payload: str) -> None:
        self.messages.append(Message(MessageKind.INFO, payload))

    def error(self, payload: str) -> None:
        self.messages.append(Message(MessageKind.ERROR, payload))

    def _require_open(self) -> None:
        if self.state is SuiteState.REPORTED:
            raise RuntimeError(f'Suite "{self.label}" has already reported')

    def _record(
        self,
        label: str,
        error: BaseException | None,
        started_at: float,
        is_async: bool,
    ) -> CaseOutcome:
        duration = time.monotonic() - started_at
        if error is None:
            self.passed += 1
            self.info(f"\tPASS:\t{label}")
            outcome = CaseOutcome(label, CaseStatus.PASSED, "", "", duration, is_async)
        elif isinstance(error, ExpectationError):
            self.failed += 1
            self.error(f"\tFAIL:\t{label}")
            self.error(_describe(error))
            outcome = CaseOutcome(
                label, CaseStatus.FAILED, str(error), _describe(error), duration, is_async
            )
        else:
            self.failed += 1
            self.errors += 1
            self.error(f"\tTEST CODE FAILURE:\t{label}")
            self.info(TEST_CODE_FAILURE_HINT)
            self.error(_describe(error))
            outcome = CaseOutcome(
                label,
                CaseStatus.ERROR,
                f"{type(error).__name__}: {error}",
                _describe(error),
                duration,
                is_async,
            )
        self.outcomes.append(outcome)
        log.debug("%s: %s (%.4fs)", self.label, outcome.status.value, duration)
        if self.detached:
            self.flush()
        return outcome

    def test(self, label: str, fn: Callable[[], Any]) -> CaseOutcome:
        """Run one synchronous test case and record its outcome."""
        self._require_open()
        self.attempts += 1
        started_at = time.monotonic()
        try:
            result = fn()
            if inspect.isawaitable(result):
                if inspect.iscoroutine(result):
                    result.close()
                raise TypeError(
                    f"test {label!r} returned an awaitable that would never be "
                    "awaited; use testasync for async tests"
                )
        except Exception as error:
            return self._record(label, error, started_at, is_async=False)
        return self._record(label, None, started_at, is_async=False)

    def testasync(
        self, label: str, asyncfn: Callable[[], Awaitable[Any]]
    ) -> asyncio.Future[None] | None:
        """Start one asynchronous test case.

        The attempt is counted immediately; the outcome is recorded whenever
        the awaitable settles. Returns a shielded handle on the task the suite
        waits on (cancelling the handle leaves the test running), or None if
        the test failed before producing an awaitable.
        """
        self._require_open()
        self.attempts += 1
        started_at = time.monotonic()
        try:
            asyncio.get_running_loop()
            awaitable = asyncfn()
            if not inspect.isawaitable(awaitable):
                raise TypeError(
                    f"testasync expected an awaitable from {label!r}, "
                    f"got {type(awaitable).__name__}"
                )
        except Exception as error:
            self._record(label, error, started_at, is_async=True)
            return None

        task = asyncio.ensure_future(self._settle(label, awaitable, started_at))
        self._pending.append(task)
        return asyncio.shield(task)

    async def _settle(
        self, label: str, awaitable: Awaitable[Any], started_at: float
    ) -> None:
        try:
            await awaitable
        except asyncio.CancelledError as error:
            self._record(label, error, started_at, is_async=True)
            raise
        except Exception as error:
            self._record(label, error, started_at, is_async=True)
        else:
            self._record(label, None, started_at, is_async=True)

    def start(self) -> None:
        self.state = SuiteState.RUNNING
        self._started_at = time.monotonic()
        self.info(f'Starting "{self.label}" suite')
        log.debug('Suite "%s" started', self.label)

    async def drain(self) -> None:
        """Wait until every registered async test has settled.

        Tests registered while draining are waited on as well.
        """
        if not self.detached:
            self.state = SuiteState.DRAINING
        while self._pending:
            batch, self._pending = self._pending, []
            log.debug(
                'Suite "%s" waiting on %d async test(s)', self.label, len(batch)
            )
            await asyncio.gather(*batch, return_exceptions=True)

    def flush(self) -> None:
        """Write buffered messages to the output channel, in order."""
        for message in self.messages:
            level = logging.ERROR if message.kind is MessageKind.ERROR else logging.INFO
            self.output.log(level, message.payload)
        self.messages.clear()

    def finish(self) -> SuiteReport:
        self.info(f'Results for "{self.label}" suite')
        self.info(
            f"{self.passed}/{self.attempts} tests passed. {self.failed} tests failed"
        )
        self.info(SEPARATOR)
        self.flush()
        self.state = SuiteState.REPORTED

        report = SuiteReport(
            label=self.label,
            attempts=self.attempts,
            passed=self.passed,
            failed=self.failed,
            errors=self.errors,
            duration_seconds=round(time.monotonic() - self._started_at, 4),
            outcomes=list(self.outcomes),
        )
        reports = _collected_reports.get()
        if reports is not None:
            reports.append(report)
        return report

    async def run(self, body: Callable[[Suite], Any]) -> SuiteReport:
        """Run ``body`` synchronously, wait for its async tests, then report."""
        if self.state is not SuiteState.IDLE:
            raise RuntimeError(f'Suite "{self.label}" has already been run')
        self.start()
        started_at = time.monotonic()
        try:
            body(self)
        except Exception as error:
            self.attempts += 1
            self._record(BODY_LABEL, error, started_at, is_async=False)
        await self.drain()
        return self.finish()


async def suite(
    label: str,
    body: Callable[[Suite], Any],
    output: logging.Logger | None = None,
) -> SuiteReport:
    """Execute a suite of tests and report the results.

    ``body`` receives the fresh ``Suite`` and registers tests on it. The
    returned report is available once every async test has settled and the
    suite's messages have been written.
    """
    return await Suite(label, output=output).run(body)


def run_suite(
    label: str,
    body: Callable[[Suite], Any],
    output: logging.Logger | None = None,
) -> SuiteReport:
    """Synchronous wrapper around ``suite`` for scripts without an event loop."""
    return asyncio.run(suite(label, body, output=output))


def test(
    label: str, fn: Callable[[], Any], output: logging.Logger | None = None
) -> CaseOutcome:
    """Run a single test outside of any suite.

    The outcome is written immediately and does not count toward any suite.
    """
    return Suite(label, output=output, detached=True).test(label, fn)


async def testasync(
    label: str,
    asyncfn: Callable[[], Awaitable[Any]],
    output: logging.Logger | None = None,
) -> CaseOutcome:
    """Run a single async test outside of any suite and wait for its outcome."""
    context = Suite(label, output=output, detached=True)
    context.testasync(label, asyncfn)
    await context.drain()
    return context.outcomes[-1]


_collected_reports: ContextVar[list[SuiteReport] | None] = ContextVar(
    "casualtest_collected_reports", default=None
)


@contextmanager
def collect_reports() -> Iterator[list[SuiteReport]]:
    """Gather every ``SuiteReport`` finished inside the block."""
    reports: list[SuiteReport] = []
    token = _collected_reports.set(reports)
    try:
        yield reports
    finally:
        _collected_reports.reset(token)
