from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from casualtest.suite import SuiteReport


@dataclass
class DurationStatistics:
    """Statistics for test durations, in seconds."""

    avg: float | None
    min: float | None
    max: float | None
    stddev: float | None

    def to_dict(self) -> dict[str, float | None]:
        return asdict(self)


@dataclass
class RunSummary:
    """Totals across every suite reported in one run."""

    suites: int
    attempts: int
    passed: int
    failed: int
    errors: int
    pass_rate: float
    duration_stats: DurationStatistics

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "suites": self.suites,
            "attempts": self.attempts,
            "passed": self.passed,
            "failed": self.failed,
            "errors": self.errors,
            "pass_rate": self.pass_rate,
            "duration_stats": self.duration_stats.to_dict(),
        }


def compute_stats(values: list[float | int | None]) -> DurationStatistics:
    """Compute avg, min, max, stddev for a list of numeric values."""
    nums = [v for v in values if v is not None]
    if not nums:
        return DurationStatistics(avg=None, min=None, max=None, stddev=None)

    arr = np.array(nums, dtype=float)
    return DurationStatistics(
        avg=round(float(np.mean(arr)), 4),
        min=round(float(np.min(arr)), 4),
        max=round(float(np.max(arr)), 4),
        stddev=round(float(np.std(arr)), 4),
    )


def suite_duration_stats(report: SuiteReport) -> DurationStatistics:
    return compute_stats([o.duration_seconds for o in report.outcomes])


def aggregate_reports(reports: list[SuiteReport]) -> RunSummary:
    """Aggregate suite reports into a single run summary."""
    attempts = sum(r.attempts for r in reports)
    passed = sum(r.passed for r in reports)
    failed = sum(r.failed for r in reports)
    errors = sum(r.errors for r in reports)
    pass_rate = (passed / attempts * 100) if attempts > 0 else 0.0

    durations = [o.duration_seconds for r in reports for o in r.outcomes]

    return RunSummary(
        suites=len(reports),
        attempts=attempts,
        passed=passed,
        failed=failed,
        errors=errors,
        pass_rate=round(pass_rate, 2),
        duration_stats=compute_stats(durations),
    )
