"""Base data structures for the expectation system."""

from dataclasses import dataclass


@dataclass
class AssertionResult:
    """Result of evaluating a single matcher.

    Attributes:
        name: Identifier for the matcher (e.g. "is_close_to:0.5").
        passed: Whether the matcher's condition held.
        message: Human-readable detail about the result. For failures this
            is the text reported alongside the test label.
    """

    name: str
    passed: bool
    message: str

    def __str__(self) -> str:
        return self.message
