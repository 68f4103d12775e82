# patient_ui/core/element.py
from __future__ import annotations

"""Patient element
------------------
One logical remote element: a cached handle that is re-resolved through its
locator when missing or stale, plus retrying action execution.
"""

from typing import Any, Callable, List, Optional, TypeVar

from patient_ui.core.base import PatientBase
from patient_ui.core.cache import CacheState, RetryingExecutor
from patient_ui.core.config import PatientConfig
from patient_ui.core.errors import ElementNotFoundError, RESERVED_EXCEPTIONS, StaleHandleError
from patient_ui.core.locator import ElementLocator
from patient_ui.utils.logger import get_logger

R = TypeVar("R")

__all__ = ["PatientElement"]

log = get_logger(__name__)


class PatientElement(PatientBase):
    """
    Element handed out by an ElementLocator.

    Actions go through `apply` / `accept`; presence checks always look again
    rather than trusting the cache. Not thread-safe.
    """

    def __init__(
        self,
        description: str,
        config: PatientConfig,
        locator: ElementLocator,
        index: int,
        *,
        timeout_ms: int,
        not_present_timeout_ms: int,
        initial_handle: Any = None,
    ) -> None:
        super().__init__(description, config)
        self._locator = locator
        self._index = index
        self._timeout_ms = timeout_ms
        self._not_present_timeout_ms = not_present_timeout_ms
        self._executor = RetryingExecutor(
            lambda: locator._resolve(index, timeout_ms),
            initial_handle,
            max_attempts=config.max_action_attempts,
            ignored=config.ignored_action_exceptions,
            description=description,
        )

    @property
    def index(self) -> int:
        return self._index

    @property
    def cache_state(self) -> CacheState:
        return self._executor.state

    def with_wrapped_handle(self) -> RetryingExecutor:
        """Escape hatch: the executor holding the raw driver handle."""
        return self._executor

    def invalidate(self) -> None:
        self._executor.invalidate()

    # ---------- Presence ----------

    def is_present(self, timeout_ms: Optional[int] = None) -> bool:
        """
        Look the element up again, ignoring anything cached.
        On success the fresh handle is cached; on failure the cache is left empty.
        """
        timeout = self._timeout_ms if timeout_ms is None else timeout_ms
        self._executor.invalidate()
        try:
            handle = self._locator._resolve(self._index, timeout)
        except ElementNotFoundError:
            self._executor.clear()
            return False
        self._executor.set(handle)
        return True

    def is_absent(self, timeout_ms: Optional[int] = None) -> bool:
        """
        Wait for the element to go away.

        On timeout this returns False and caches the handle that was still
        there, so the next action does not need another lookup.
        """
        timeout = self._not_present_timeout_ms if timeout_ms is None else timeout_ms
        if timeout < 0:
            raise ValueError("Cannot use a null or negative timeout.")
        self._executor.invalidate()
        absent, last_handle = self._locator._await_absence(self._index, timeout)
        if absent:
            self._executor.clear()
            return True
        if last_handle is not None:
            self._executor.set(last_handle)
        return False

    # ---------- Actions ----------

    def apply(self, fn: Callable[[Any], R]) -> R:
        return self._executor.apply(fn)

    def accept(self, fn: Callable[[Any], Any]) -> None:
        self._executor.accept(fn)

    def click(self) -> None:
        log.debug(f"click {self}")
        self.accept(lambda h: h.click())

    def fill(self, text: str) -> None:
        log.debug(f"fill {self}")
        self.accept(lambda h: h.fill(text))

    def text(self) -> str:
        return self.apply(lambda h: h.text())

    def is_displayed(self) -> bool:
        return self.apply(lambda h: h.is_displayed())

    def get_attribute(self, name: str) -> Optional[str]:
        return self.apply(lambda h: h.get_attribute(name))

    # ---------- Nested search ----------

    def _find_children(self, selector: Any) -> List[Any]:
        """
        One look at this element's children, without waiting for the element
        itself: [] while it is missing or stale, so the child locator keeps polling.
        """
        try:
            if not self._executor.is_cached:
                matches = self._locator._matches(self._index + 1)
                if len(matches) <= self._index:
                    return []
                self._executor.set(matches[self._index])
            return self._executor.peek().find_children(selector)
        except RESERVED_EXCEPTIONS as exc:
            self._executor.invalidate()
            if isinstance(exc, StaleHandleError):
                log.debug(f"{self} went stale while looking for {selector}")
            return []
        except Exception as exc:
            self._executor.invalidate()
            if not isinstance(exc, tuple(self.config.ignored_lookup_exceptions)):
                raise
            return []

    def find(self, selector: Any) -> ElementLocator:
        """Locator for children of this element. Polls this element and its children together."""
        if selector is None:
            raise ValueError("Cannot find elements with a null selector.")
        return ElementLocator(
            f"{self}.find({selector})",
            self.config,
            lambda: self._find_children(selector),
        )
