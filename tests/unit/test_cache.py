import pytest

from patient_ui.core.cache import CacheState, CachingExecutor, RetryingExecutor
from patient_ui.core.errors import (
    ElementNotFoundError,
    ErrorKind,
    StaleHandleError,
    classify_error,
)
from patient_ui.core.optional import OptionalExecutor


class Resolver:
    def __init__(self, *handles):
        self.handles = list(handles)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.handles[min(self.calls, len(self.handles)) - 1]


def test_caching_executor_resolves_once_until_invalidated():
    resolver = Resolver("h1", "h2")
    ex = CachingExecutor(resolver)
    assert ex.state is CacheState.EMPTY

    assert ex.apply(str.upper) == "H1"
    assert ex.apply(str.upper) == "H1"
    assert resolver.calls == 1
    assert ex.is_cached

    ex.invalidate()
    assert ex.state is CacheState.INVALIDATED
    assert ex.peek() is None
    assert ex.apply(lambda h: h) == "h2"

    ex.clear()
    assert ex.state is CacheState.EMPTY


def test_initial_handle_is_cached():
    resolver = Resolver("never")
    ex = CachingExecutor(resolver, initial="seed")
    assert ex.get() == "seed"
    assert resolver.calls == 0


def test_resolver_returning_none_is_an_error():
    with pytest.raises(RuntimeError):
        CachingExecutor(lambda: None).get()


def test_retrying_executor_gives_up_after_max_attempts():
    resolver = Resolver("h1", "h2", "h3", "h4")

    def always_stale(handle):
        raise StaleHandleError(handle)

    ex = RetryingExecutor(resolver, max_attempts=3)
    with pytest.raises(StaleHandleError) as ei:
        ex.apply(always_stale)
    assert resolver.calls == 3
    assert str(ei.value) == "h3"
    assert ex.state is CacheState.INVALIDATED


def test_retrying_executor_recovers_from_a_stale_handle():
    resolver = Resolver("old", "new")
    seen = []

    def act(handle):
        seen.append(handle)
        if handle == "old":
            raise StaleHandleError("detached")
        return handle

    assert RetryingExecutor(resolver).apply(act) == "new"
    assert seen == ["old", "new"]


def test_ignored_exceptions_are_retried_but_fatal_ones_are_not():
    resolver = Resolver("h")
    calls = []

    def flaky(handle):
        calls.append(handle)
        raise ValueError("not clickable yet")

    ex = RetryingExecutor(resolver, max_attempts=2, ignored=(ValueError,))
    with pytest.raises(ValueError):
        ex.apply(flaky)
    assert len(calls) == 2

    calls.clear()
    with pytest.raises(ValueError):
        RetryingExecutor(resolver, max_attempts=5).apply(flaky)
    assert len(calls) == 1


def test_not_found_is_not_retried():
    resolver = Resolver("h")

    def missing(handle):
        raise ElementNotFoundError("gone")

    with pytest.raises(ElementNotFoundError):
        RetryingExecutor(resolver, max_attempts=3).apply(missing)
    assert resolver.calls == 1


def test_max_attempts_must_be_positive():
    with pytest.raises(ValueError):
        RetryingExecutor(lambda: "h", max_attempts=0)


@pytest.mark.parametrize(
    "exc, ignored, kind",
    [
        (ElementNotFoundError("x"), (), ErrorKind.NOT_FOUND),
        (StaleHandleError("x"), (), ErrorKind.TRANSIENT),
        (ValueError("x"), (ValueError,), ErrorKind.IGNORABLE),
        (ValueError("x"), (), ErrorKind.FATAL),
    ],
)
def test_classify_error(exc, ignored, kind):
    assert classify_error(exc, ignored) is kind


def test_optional_executor_runs_otherwise_only_when_asked():
    ran = []
    OptionalExecutor(False).otherwise(lambda: ran.append("no"))
    OptionalExecutor(True).otherwise(lambda: ran.append("yes"))
    assert ran == ["yes"]
