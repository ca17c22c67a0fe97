"""Error taxonomy.

Only matchers raise ``ExpectationError``; it marks a violated expectation.
Any other exception escaping a test body is a flaw in the test code (or in
casualtest itself) and is reported as a test code failure.
"""

from __future__ import annotations

from casualtest.assertions.base import AssertionResult


class ExpectationError(AssertionError):
    """A matcher's condition did not hold."""

    def __init__(self, result: AssertionResult | str):
        if isinstance(result, str):
            result = AssertionResult(name="expectation", passed=False, message=result)
        super().__init__(result.message)
        self.result = result


class MatcherUsageError(TypeError):
    """A matcher was given an argument it cannot compare against."""


TEST_CODE_FAILURE_HINT = (
    "\tThis test failed due to an unexpected bug or a flaw in the test code, "
    "not due to a failed test expectation."
)
