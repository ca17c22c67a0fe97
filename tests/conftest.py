"""Pytest configuration and fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def cleanup_loggers():
    """Reset casualtest loggers after each test so handlers bind to fresh streams."""
    yield

    # Module loggers keep references to their parents, so reset rather than delete
    names = [
        name
        for name in logging.Logger.manager.loggerDict.keys()
        if name.startswith("casualtest")
    ]

    for name in names:
        logger = logging.getLogger(name)
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True


class RecordingHandler(logging.Handler):
    """Keeps every record emitted to it, in order."""

    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    @property
    def lines(self) -> list[tuple[str, str]]:
        return [(r.levelname, r.getMessage()) for r in self.records]

    @property
    def messages(self) -> list[str]:
        return [r.getMessage() for r in self.records]


@pytest.fixture
def recording():
    return RecordingHandler()


@pytest.fixture
def output(recording):
    """Output logger whose lines are kept on ``recording`` instead of printed."""
    logger = logging.getLogger("casualtest_test_output")
    logger.handlers.clear()
    logger.setLevel(logging.INFO)
    logger.propagate = False
    logger.addHandler(recording)
    return logger
