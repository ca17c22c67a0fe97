import pytest

from casualtest.metrics import aggregate_reports, compute_stats, suite_duration_stats
from casualtest.suite import CaseOutcome, CaseStatus, SuiteReport


def _report(label, statuses, durations=None):
    durations = durations or [0.1] * len(statuses)
    outcomes = [
        CaseOutcome(f"{label}-{i}", status, duration_seconds=d)
        for i, (status, d) in enumerate(zip(statuses, durations))
    ]
    passed = sum(1 for s in statuses if s is CaseStatus.PASSED)
    errors = sum(1 for s in statuses if s is CaseStatus.ERROR)
    return SuiteReport(
        label=label,
        attempts=len(statuses),
        passed=passed,
        failed=len(statuses) - passed,
        errors=errors,
        duration_seconds=sum(durations),
        outcomes=outcomes,
    )


def test_compute_stats_basic():
    stats = compute_stats([1.0, 2.0, 3.0])
    assert stats.avg == 2.0
    assert stats.min == 1.0
    assert stats.max == 3.0
    assert stats.stddev == pytest.approx(0.8165, abs=1e-4)


def test_compute_stats_ignores_none():
    stats = compute_stats([None, 4, None])
    assert stats.avg == 4.0
    assert stats.stddev == 0.0


def test_compute_stats_empty():
    stats = compute_stats([])
    assert stats.to_dict() == {"avg": None, "min": None, "max": None, "stddev": None}


def test_suite_duration_stats():
    report = _report("s", [CaseStatus.PASSED, CaseStatus.PASSED], [0.2, 0.4])
    stats = suite_duration_stats(report)
    assert stats.avg == pytest.approx(0.3)
    assert stats.max == pytest.approx(0.4)


def test_aggregate_reports_totals():
    reports = [
        _report("a", [CaseStatus.PASSED, CaseStatus.FAILED]),
        _report("b", [CaseStatus.PASSED, CaseStatus.ERROR, CaseStatus.PASSED]),
    ]
    summary = aggregate_reports(reports)

    assert summary.suites == 2
    assert summary.attempts == 5
    assert summary.passed == 3
    assert summary.failed == 2
    assert summary.errors == 1
    assert summary.pass_rate == 60.0
    assert summary.ok is False
    assert summary.duration_stats.avg == pytest.approx(0.1)


def test_aggregate_reports_empty():
    summary = aggregate_reports([])
    assert summary.attempts == 0
    assert summary.pass_rate == 0.0
    assert summary.ok is True
    assert summary.to_dict()["duration_stats"]["avg"] is None
