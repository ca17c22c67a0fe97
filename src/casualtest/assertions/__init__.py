"""Assertion results shared by matchers and reporting."""

from casualtest.assertions.base import AssertionResult

__all__ = ["AssertionResult"]
