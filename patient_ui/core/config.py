# patient_ui/core/config.py
from __future__ import annotations

"""Patient policy
-----------------
Immutable bundle of defaults shared by a driver and everything located from it.
"""

from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, InstanceOf, field_validator

from patient_ui.core.errors import ConfigurationError, RESERVED_EXCEPTIONS
from patient_ui.utils.config import Settings, get_settings
from patient_ui.utils.timing import PatientWait

__all__ = ["PatientConfig", "not_none"]


def not_none(handle: Any) -> bool:
    return handle is not None


class PatientConfig(BaseModel):
    """
    Defaults for waiting, filtering and retrying.

    The two ignored-exception sets widen what the engine tolerates while
    polling for elements (`ignored_lookup_exceptions`) and while running an
    action on a located element (`ignored_action_exceptions`). Neither may
    name `ElementNotFoundError` or `StaleHandleError` (or a base class of
    them); those are always handled by the engine itself.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    wait: InstanceOf[PatientWait] = Field(default_factory=PatientWait)
    present_timeout_ms: int = Field(default=30000, ge=0)
    not_present_timeout_ms: int = Field(default=10000, ge=0)
    element_filter: Callable[[Any], bool] = Field(default=not_none)
    max_action_attempts: int = Field(default=3, ge=1)
    ignored_lookup_exceptions: frozenset[type[BaseException]] = Field(default_factory=frozenset)
    ignored_action_exceptions: frozenset[type[BaseException]] = Field(default_factory=frozenset)

    @field_validator("ignored_lookup_exceptions", "ignored_action_exceptions")
    @classmethod
    def _reject_reserved(cls, kinds: frozenset[type[BaseException]], info):
        for kind in kinds:
            for reserved in RESERVED_EXCEPTIONS:
                if issubclass(reserved, kind):
                    raise ConfigurationError(
                        f"{info.field_name} cannot include {kind.__name__}: "
                        f"{reserved.__name__} is always handled by the engine"
                    )
        return kinds

    def with_overrides(self, **fields: Any) -> "PatientConfig":
        """Copy with some fields replaced; the result is validated again."""
        return type(self)(**{**dict(self), **fields})

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **overrides: Any) -> "PatientConfig":
        s = settings or get_settings()
        wait = PatientWait(
            interval_ms=s.POLL_INTERVAL_MS,
            backoff_factor=s.POLL_BACKOFF_FACTOR,
            max_interval_ms=s.MAX_POLL_INTERVAL_MS,
        )
        values: dict[str, Any] = {
            "wait": wait,
            "present_timeout_ms": s.PRESENT_TIMEOUT_MS,
            "not_present_timeout_ms": s.NOT_PRESENT_TIMEOUT_MS,
            "max_action_attempts": s.MAX_ACTION_ATTEMPTS,
        }
        values.update(overrides)
        return cls(**values)
