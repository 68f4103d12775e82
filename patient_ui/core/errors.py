# patient_ui/core/errors.py
from __future__ import annotations

"""Error taxonomy
-----------------
Exceptions raised by the patient engine, and the small classifier the retry
loops use to decide what to do with a failure.
"""

from enum import Enum
from typing import Iterable, Type

__all__ = [
    "PatientError",
    "ElementNotFoundError",
    "StaleHandleError",
    "InitializationError",
    "ConfigurationError",
    "UnwiredFieldError",
    "ErrorKind",
    "RESERVED_EXCEPTIONS",
    "classify_error",
]


class PatientError(Exception):
    """Base class for everything raised by patient_ui itself."""


class ElementNotFoundError(PatientError):
    """A patient wait for a matching element ran out of time."""

    def __init__(self, message: str, *, description: str = "", index: int = 0,
                 timeout_ms: int = 0, attempts: int = 0) -> None:
        super().__init__(message)
        self.description = description
        self.index = index
        self.timeout_ms = timeout_ms
        self.attempts = attempts


class StaleHandleError(PatientError):
    """
    A previously valid remote handle is no longer usable (detached/replaced).

    Driver adapters raise this in place of their native "stale" error.
    """


class InitializationError(PatientError):
    """Page object wiring failed. Never retried."""


class ConfigurationError(InitializationError):
    """An invalid policy or selector declaration was supplied."""


class UnwiredFieldError(InitializationError, AttributeError):
    """
    A page-object slot was read before an initializer wired it. Also an
    AttributeError, so `hasattr` / `getattr(obj, name, default)` behave.
    """


# Always handled explicitly by the engine, never configurable.
RESERVED_EXCEPTIONS: tuple[Type[BaseException], ...] = (ElementNotFoundError, StaleHandleError)


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    TRANSIENT = "transient"
    IGNORABLE = "ignorable"
    FATAL = "fatal"


def classify_error(exc: BaseException, ignored: Iterable[Type[BaseException]] = ()) -> ErrorKind:
    """Map an exception raised at the driver boundary onto an ErrorKind."""
    if isinstance(exc, ElementNotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(exc, StaleHandleError):
        return ErrorKind.TRANSIENT
    if isinstance(exc, tuple(ignored)):
        return ErrorKind.IGNORABLE
    return ErrorKind.FATAL
