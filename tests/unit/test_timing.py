from itertools import islice

import pytest

from patient_ui.utils.timing import PatientTimeoutError, PatientWait, Stopwatch


def test_zero_timeout_makes_one_attempt_without_sleeping(clock):
    calls = []

    def supplier():
        calls.append(1)
        return []

    with pytest.raises(PatientTimeoutError) as ei:
        PatientWait.fixed(100).until(supplier, 0)

    assert len(calls) == 1
    assert clock.sleeps == []
    assert ei.value.attempts == 1
    assert ei.value.last_value == []


def test_returns_first_accepted_value(clock):
    values = iter([0, 0, 7, 9])
    result = PatientWait.fixed(100).until(lambda: next(values), 1000)
    assert result == 7
    assert clock.sleeps == [100, 100]


def test_times_out_at_deadline_with_attempt_count(clock):
    with pytest.raises(PatientTimeoutError) as ei:
        PatientWait.fixed(100).until(lambda: None, 250, description="thing")
    # polls at 0, 100, 200 and a last one at the 250 ms deadline
    assert ei.value.attempts == 4
    assert clock.sleeps == [100, 100, 50]
    assert ei.value.elapsed_ms == 250
    assert "thing" in str(ei.value)
    assert isinstance(ei.value, TimeoutError)


def test_custom_accept_predicate(clock):
    values = iter([[1], [1, 2], [1, 2, 3]])
    result = PatientWait.fixed(10).until(lambda: next(values), 100, accept=lambda v: len(v) > 1)
    assert result == [1, 2]


def test_ignored_exceptions_count_as_failed_attempts(clock):
    outcomes = iter([KeyError("a"), KeyError("b"), "ok"])

    def supplier():
        value = next(outcomes)
        if isinstance(value, Exception):
            raise value
        return value

    assert PatientWait.fixed(100).until(supplier, 1000, ignoring=(KeyError,)) == "ok"
    assert len(clock.sleeps) == 2


def test_other_exceptions_propagate_immediately(clock):
    def supplier():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        PatientWait.fixed(100).until(supplier, 1000, ignoring=(KeyError,))
    assert clock.sleeps == []


def test_negative_timeout_is_rejected():
    with pytest.raises(ValueError):
        PatientWait().until(lambda: 1, -1)


def test_backoff_grows_up_to_max():
    wait = PatientWait(interval_ms=100, backoff_factor=2.0, max_interval_ms=400)
    assert list(islice(wait.delays(), 5)) == [100, 200, 400, 400, 400]


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(interval_ms=-1),
        dict(backoff_factor=0.5),
        dict(interval_ms=500, max_interval_ms=100),
        dict(jitter=1.5),
    ],
)
def test_invalid_wait_policies(kwargs):
    with pytest.raises(ValueError):
        PatientWait(**kwargs)


def test_stopwatch_uses_clock(clock):
    with Stopwatch() as sw:
        clock.now += 42
        assert sw.elapsed_ms() == 42
    assert Stopwatch().elapsed_ms() == 0
