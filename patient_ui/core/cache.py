# patient_ui/core/cache.py
from __future__ import annotations

"""Handle caches
----------------
A cached remote handle (element or session) plus the executors that run
callables against it. Not safe for concurrent use: one logical thread drives a
given driver/element graph at a time.
"""

from enum import Enum
from typing import Any, Callable, Generic, Iterable, Optional, Type, TypeVar

from patient_ui.core.errors import ErrorKind, classify_error
from patient_ui.utils.logger import get_logger

T = TypeVar("T")
R = TypeVar("R")

__all__ = ["CacheState", "CachingExecutor", "RetryingExecutor"]

log = get_logger(__name__)


class CacheState(str, Enum):
    EMPTY = "empty"              # never resolved, or a presence check failed
    CACHED = "cached"            # holding a handle believed to be valid
    INVALIDATED = "invalidated"  # handle discarded, must re-resolve


class CachingExecutor(Generic[T]):
    """Lazily resolves a handle once and hands it to callables until cleared."""

    def __init__(self, resolver: Callable[[], T], initial: Optional[T] = None) -> None:
        if not callable(resolver):
            raise TypeError("Cannot use a non-callable resolver.")
        self._resolver = resolver
        self._handle: Optional[T] = None
        self._state = CacheState.EMPTY
        if initial is not None:
            self.set(initial)

    @property
    def state(self) -> CacheState:
        return self._state

    @property
    def is_cached(self) -> bool:
        return self._state is CacheState.CACHED

    def peek(self) -> Optional[T]:
        """Return the cached handle without resolving."""
        return self._handle

    def get(self) -> T:
        if self._state is not CacheState.CACHED:
            handle = self._resolver()
            if handle is None:
                raise RuntimeError("Received None from the handle resolver.")
            self.set(handle)
        return self._handle  # type: ignore[return-value]

    def set(self, handle: T) -> None:
        self._handle = handle
        self._state = CacheState.CACHED

    def invalidate(self) -> None:
        self._handle = None
        self._state = CacheState.INVALIDATED

    def clear(self) -> None:
        self._handle = None
        self._state = CacheState.EMPTY

    def apply(self, fn: Callable[[T], R]) -> R:
        if not callable(fn):
            raise TypeError("Cannot execute a non-callable.")
        return fn(self.get())

    def accept(self, fn: Callable[[T], Any]) -> None:
        self.apply(fn)


class RetryingExecutor(CachingExecutor[T]):
    """
    CachingExecutor that survives stale handles.

    Each attempt resolves a handle if none is cached and runs the callable.
    A stale handle (or an exception in `ignored`) invalidates the cache and
    starts over, up to `max_attempts` attempts in total; the last such failure
    is then re-raised. Not-found is never retried here, since resolution
    already waited patiently for it.
    """

    def __init__(
        self,
        resolver: Callable[[], T],
        initial: Optional[T] = None,
        *,
        max_attempts: int = 3,
        ignored: Iterable[Type[BaseException]] = (),
        description: str = "",
    ) -> None:
        super().__init__(resolver, initial)
        if max_attempts < 1:
            raise ValueError("Cannot use a max_attempts value that is less than 1.")
        self.max_attempts = max_attempts
        self._ignored = tuple(ignored)
        self._description = description

    def apply(self, fn: Callable[[T], R]) -> R:
        if not callable(fn):
            raise TypeError("Cannot execute a non-callable.")
        last_exc: Optional[BaseException] = None
        for attempt in range(1, self.max_attempts + 1):
            handle = self.get()
            try:
                return fn(handle)
            except Exception as exc:
                kind = classify_error(exc, self._ignored)
                if kind in (ErrorKind.NOT_FOUND, ErrorKind.FATAL):
                    raise
                last_exc = exc
                self.invalidate()
                log.debug(
                    f"{self._description or 'handle'}: attempt {attempt}/{self.max_attempts} "
                    f"failed with {exc!r} ({kind.value}), cache invalidated"
                )
        assert last_exc is not None
        raise last_exc
