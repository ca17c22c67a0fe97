"""A small toolkit for writing tests: suites, expectations and masques."""

from casualtest.assertions.base import AssertionResult
from casualtest.errors import ExpectationError, MatcherUsageError
from casualtest.expectations import Category, Expectation, classify, expect
from casualtest.masque import CallOutcome, CallRecord, Masque, masque, record
from casualtest.suite import (
    CaseOutcome,
    CaseStatus,
    Suite,
    SuiteReport,
    collect_reports,
    run_suite,
    suite,
    test,
    testasync,
)

__all__ = [
    "AssertionResult",
    "CallOutcome",
    "CallRecord",
    "CaseOutcome",
    "CaseStatus",
    "Category",
    "Expectation",
    "ExpectationError",
    "Masque",
    "MatcherUsageError",
    "Suite",
    "SuiteReport",
    "classify",
    "collect_reports",
    "expect",
    "masque",
    "record",
    "run_suite",
    "suite",
    "test",
    "testasync",
]
