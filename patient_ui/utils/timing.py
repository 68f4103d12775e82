# patient_ui/utils/timing.py
from __future__ import annotations

import math
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Type, TypeVar

from patient_ui.utils.logger import get_logger

T = TypeVar("T")

log = get_logger(__name__)

__all__ = [
    "now_ms",
    "sleep_ms",
    "Stopwatch",
    "backoff_delays_ms",
    "PatientTimeoutError",
    "PatientWait",
]


# ---------------- Monotonic time helpers ----------------

def now_ms() -> int:
    """Monotonic time in milliseconds."""
    return time.monotonic_ns() // 1_000_000


def sleep_ms(ms: int) -> None:
    """Sleep for `ms` milliseconds (blocking)."""
    if ms <= 0:
        return
    time.sleep(ms / 1000.0)


# ---------------- Stopwatch ----------------

@dataclass
class Stopwatch:
    """Simple stopwatch usable as a context manager."""
    start_ms: Optional[int] = None

    def start(self) -> "Stopwatch":
        self.start_ms = now_ms()
        return self

    def elapsed_ms(self) -> int:
        if self.start_ms is None:
            return 0
        return max(0, now_ms() - self.start_ms)

    def __enter__(self) -> "Stopwatch":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        return None


# ---------------- Backoff ----------------

def backoff_delays_ms(
    initial_ms: int = 500,
    factor: float = 1.0,
    max_ms: int = 500,
    jitter: float = 0.0,
) -> Iterator[int]:
    """
    Yield an endless sequence of delays in ms.
    factor=1.0 gives a fixed delay; >1.0 grows exponentially up to `max_ms`.
    """
    delay = max(0, initial_ms)
    while True:
        jitter_amt = delay * jitter
        if jitter_amt > 0:
            delay_j = delay + random.uniform(-jitter_amt, jitter_amt)
        else:
            delay_j = delay
        yield int(min(max_ms, max(0, delay_j)))
        delay = min(max_ms, int(math.ceil(delay * factor)))


# ---------------- Patient wait ----------------

class PatientTimeoutError(TimeoutError):
    """Raised when a patient wait runs out of time without an accepted value."""

    def __init__(self, message: str, *, attempts: int, elapsed_ms: int, last_value: Any = None) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.elapsed_ms = elapsed_ms
        self.last_value = last_value


def _truthy(value: Any) -> bool:
    return bool(value)


@dataclass(frozen=True)
class PatientWait:
    """
    Poll a supplier until its value is accepted or a timeout elapses.

    The supplier is always called at least once, so a zero timeout means a
    single attempt with no sleep. Exceptions listed in `ignoring` count as a
    failed attempt; anything else propagates straight away.
    """

    interval_ms: int = 500
    backoff_factor: float = 1.0
    max_interval_ms: int = 500
    initial_delay_ms: int = 0
    jitter: float = 0.0

    def __post_init__(self) -> None:
        if self.interval_ms < 0 or self.initial_delay_ms < 0:
            raise ValueError("PatientWait delays cannot be negative")
        if self.backoff_factor < 1.0:
            raise ValueError("PatientWait.backoff_factor must be >= 1.0")
        if self.max_interval_ms < self.interval_ms:
            raise ValueError("PatientWait.max_interval_ms must be >= interval_ms")
        if not 0.0 <= self.jitter < 1.0:
            raise ValueError("PatientWait.jitter must be in [0, 1)")

    @classmethod
    def fixed(cls, interval_ms: int) -> "PatientWait":
        return cls(interval_ms=interval_ms, max_interval_ms=interval_ms)

    def delays(self) -> Iterator[int]:
        return backoff_delays_ms(
            initial_ms=self.interval_ms,
            factor=self.backoff_factor,
            max_ms=self.max_interval_ms,
            jitter=self.jitter,
        )

    def until(
        self,
        supplier: Callable[[], T],
        timeout_ms: int,
        *,
        accept: Callable[[T], bool] = _truthy,
        ignoring: tuple[Type[BaseException], ...] = (),
        description: Optional[str] = None,
    ) -> T:
        """
        Return the first supplied value for which `accept(value)` is true.

        Raises:
            PatientTimeoutError once `timeout_ms` has elapsed; it carries the
            attempt count and the last value the supplier returned.
        """
        if timeout_ms < 0:
            raise ValueError("Cannot wait with a negative timeout.")
        attempts = 0
        last_value: Any = None
        delays = self.delays()

        with Stopwatch() as sw:
            sleep_ms(min(self.initial_delay_ms, timeout_ms))
            while True:
                attempts += 1
                try:
                    value = supplier()
                except ignoring as exc:  # type: ignore[misc]
                    log.debug(f"Attempt {attempts} ignored {exc!r}{(' - ' + description) if description else ''}")
                else:
                    last_value = value
                    if accept(value):
                        return value

                remaining = timeout_ms - sw.elapsed_ms()
                if remaining <= 0:
                    desc = f" ({description})" if description else ""
                    raise PatientTimeoutError(
                        f"Timed out after {timeout_ms} ms and {attempts} attempt(s){desc}",
                        attempts=attempts,
                        elapsed_ms=sw.elapsed_ms(),
                        last_value=last_value,
                    )
                sleep_ms(min(next(delays), remaining))
