"""Tests for call-recording masques."""

import inspect

import pytest

from casualtest.masque import CallOutcome, Masque, masque, record


def test_masque_without_function_is_a_noop():
    m = masque()
    assert m() is None
    assert m(1, 2, key="v") is None
    assert m.call_count == 2


def test_masque_forwards_return_value():
    m = masque(lambda a, b: a + b)
    assert m(2, 3) == 5
    assert m.last_call.result == 5
    assert m.last_call.outcome is CallOutcome.RETURNED
    assert m.last_call.returned is True


def test_masque_records_calls_in_order():
    m = masque()
    calls = [(1,), ("a", "b"), (None, 2.5, [1])]
    for args in calls:
        m(*args)

    assert len(m.calls) == len(calls)
    for logged, args in zip(m.calls, calls):
        assert logged.args == args


def test_masque_records_keyword_arguments():
    m = masque()
    m(1, flag=True)
    assert m.last_call.args == (1,)
    assert m.last_call.kwargs == {"flag": True}


def test_reading_the_log_is_not_a_call():
    m = masque()
    m()
    _ = m.calls
    _ = m.call_count
    _ = m.last_call
    _ = m.called
    assert m.call_count == 1


def test_calls_is_a_snapshot():
    m = masque()
    snapshot = m.calls
    m()
    assert snapshot == ()
    assert len(m.calls) == 1


def test_masque_records_and_reraises_errors():
    error = ValueError("boom")

    def explode():
        raise error

    m = masque(explode)
    with pytest.raises(ValueError) as exc_info:
        m()

    assert exc_info.value is error
    assert m.call_count == 1
    assert m.last_call.outcome is CallOutcome.RAISED
    assert m.last_call.error is error
    assert m.last_call.result is None


def test_masque_keeps_wrapped_metadata():
    def handler(event, *, retries=3):
        """Handle an event."""

    m = masque(handler)
    assert m.__name__ == "handler"
    assert m.__doc__ == "Handle an event."
    assert inspect.signature(m) == inspect.signature(handler)


def test_reentrant_call_sees_pending_record():
    seen = []

    def callback(depth):
        seen.append([c.outcome for c in m.calls])
        if depth:
            m(depth - 1)

    m = masque(callback)
    m(1)

    assert seen[1] == [CallOutcome.PENDING, CallOutcome.PENDING]
    assert [c.outcome for c in m.calls] == [CallOutcome.RETURNED, CallOutcome.RETURNED]


def test_masque_of_masque_keeps_separate_logs():
    inner = masque(lambda x: x * 2)
    outer = masque(inner)

    assert outer(4) == 8
    outer(5)
    assert outer.call_count == 2
    assert inner.call_count == 2
    assert outer.inner is inner


def test_reset_clears_the_log():
    m = masque()
    m()
    m.reset()
    assert m.call_count == 0
    assert m.last_call is None
    assert not m.called


def test_record_is_masque():
    assert record is masque
    assert isinstance(record(), Masque)


def test_repr_mentions_call_count():
    def named():
        pass

    m = masque(named)
    m()
    assert "named" in repr(m)
    assert "1 call" in repr(m)
