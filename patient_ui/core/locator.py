# patient_ui/core/locator.py
from __future__ import annotations

"""Element locator
------------------
Turns a handle-list supplier (a selector evaluated against the driver or a
parent element) into patient, lazily resolved elements.
"""

from itertools import islice
from typing import Any, Callable, Dict, List, Optional, Tuple

from patient_ui.core.base import PatientBase
from patient_ui.core.config import PatientConfig
from patient_ui.core.errors import ElementNotFoundError, RESERVED_EXCEPTIONS
from patient_ui.core.optional import OptionalExecutor
from patient_ui.utils.logger import get_logger
from patient_ui.utils.timing import PatientTimeoutError, PatientWait

__all__ = ["ElementLocator"]

log = get_logger(__name__)

_UNSET: Any = object()


def _index_suffix(index: int) -> str:
    return "" if index == 0 else str(index)


class ElementLocator(PatientBase):
    """
    Locates elements matching one selector within one search context.

    `get()` is lazy: it hands back an element that resolves itself on first
    use. `get_all()` is eager. Elements returned by `get()` are memoized per
    (index, timeout), so page objects can hold on to them; each distinct
    explicit timeout passed to `get()` keeps its own entry for the life of the
    locator. Presence checks always use the default-timeout element.
    """

    def __init__(
        self,
        description: str,
        config: PatientConfig,
        handle_list_supplier: Callable[[], List[Any]],
        *,
        wait: Optional[PatientWait] = None,
        timeout_ms: Optional[int] = None,
        not_present_timeout_ms: Optional[int] = None,
        element_filter: Optional[Callable[[Any], bool]] = None,
    ) -> None:
        super().__init__(description, config)
        if not callable(handle_list_supplier):
            raise TypeError("Cannot use a non-callable handle list supplier.")
        self._supplier = handle_list_supplier
        self._wait = wait if wait is not None else config.wait
        self._timeout_ms = self._check_timeout(config.present_timeout_ms if timeout_ms is None else timeout_ms)
        self._not_present_timeout_ms = self._check_timeout(
            config.not_present_timeout_ms if not_present_timeout_ms is None else not_present_timeout_ms
        )
        self._filter = element_filter if element_filter is not None else config.element_filter
        if not callable(self._filter):
            raise TypeError("Cannot use a non-callable element filter.")
        self._elements: Dict[Tuple[int, int], Any] = {}

    # ---------- Properties ----------

    @property
    def wait(self) -> PatientWait:
        return self._wait

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    @property
    def not_present_timeout_ms(self) -> int:
        return self._not_present_timeout_ms

    @property
    def element_filter(self) -> Callable[[Any], bool]:
        return self._filter

    # ---------- Internals ----------

    @staticmethod
    def _check_timeout(timeout_ms: int) -> int:
        if timeout_ms is None or timeout_ms < 0:
            raise ValueError("Cannot use a null or negative timeout.")
        return timeout_ms

    def _timeout_or_default(self, timeout_ms: Optional[int], default: int) -> int:
        return default if timeout_ms is None else self._check_timeout(timeout_ms)

    def _ignored_lookup(self) -> tuple:
        return RESERVED_EXCEPTIONS + tuple(self.config.ignored_lookup_exceptions)

    def _matches(self, limit: Optional[int] = None) -> List[Any]:
        handles = self._supplier()
        if handles is None:
            raise TypeError(f"Received None from the element supplier of {self}.")
        return list(islice(filter(self._filter, handles), limit))

    def _resolve(self, index: int, timeout_ms: int) -> Any:
        """Wait for at least index+1 matches and return the handle at `index`."""
        try:
            matches = self._wait.until(
                lambda: self._matches(index + 1),
                timeout_ms,
                accept=lambda found: len(found) > index,
                ignoring=self._ignored_lookup(),
                description=f"{self}.get({_index_suffix(index)})",
            )
        except PatientTimeoutError as timeout:
            raise ElementNotFoundError(
                f"No element found matching {self}.get({_index_suffix(index)}) "
                f"within {timeout_ms} ms after {timeout.attempts} attempt(s)",
                description=self.description,
                index=index,
                timeout_ms=timeout_ms,
                attempts=timeout.attempts,
            ) from timeout
        log.debug(f"Resolved {self}.get({_index_suffix(index)})")
        return matches[index]

    def _await_absence(self, index: int, timeout_ms: int) -> Tuple[bool, Any]:
        """
        Wait until fewer than index+1 matches remain.
        Returns (True, None) on success, else (False, last handle seen at `index`).
        """
        try:
            self._wait.until(
                lambda: self._matches(index + 1),
                timeout_ms,
                accept=lambda found: len(found) <= index,
                ignoring=self._ignored_lookup(),
                description=f"{self}.get({_index_suffix(index)}) to go away",
            )
            return True, None
        except PatientTimeoutError as timeout:
            last = timeout.last_value or []
            return False, (last[index] if len(last) > index else None)

    def _build_element(self, index: int, timeout_ms: int, initial_handle: Any = None):
        from patient_ui.core.element import PatientElement

        return PatientElement(
            f"{self}.get({_index_suffix(index)})",
            self.config,
            self,
            index,
            timeout_ms=timeout_ms,
            not_present_timeout_ms=self._not_present_timeout_ms,
            initial_handle=initial_handle,
        )

    # ---------- Public API ----------

    def get(self, index: int = 0, timeout_ms: Optional[int] = None):
        """
        Return the (lazy) element at `index`. Never waits by itself; the
        element resolves when first used and raises ElementNotFoundError then.
        """
        if index < 0:
            raise ValueError("Cannot locate an element with a negative index.")
        timeout = self._timeout_or_default(timeout_ms, self._timeout_ms)
        key = (index, timeout)
        element = self._elements.get(key)
        if element is None:
            element = self._build_element(index, timeout)
            self._elements[key] = element
        return element

    def get_all(self, timeout_ms: Optional[int] = None) -> list:
        """
        Wait until at least one element matches and return all current matches,
        each already resolved. Returns [] when nothing matched within the timeout.
        """
        timeout = self._timeout_or_default(timeout_ms, self._timeout_ms)
        try:
            handles = self._wait.until(
                self._matches,
                timeout,
                accept=bool,
                ignoring=self._ignored_lookup(),
                description=f"{self}.get_all()",
            )
        except PatientTimeoutError:
            log.debug(f"{self}.get_all() matched nothing within {timeout} ms")
            return []
        return [self._build_element(i, timeout, initial_handle=h) for i, h in enumerate(handles)]

    def is_present(self, timeout_ms: Optional[int] = None) -> bool:
        timeout = self._timeout_or_default(timeout_ms, self._timeout_ms)
        return self.get(0).is_present(timeout)

    def is_not_present(self, timeout_ms: Optional[int] = None) -> bool:
        timeout = self._timeout_or_default(timeout_ms, self._not_present_timeout_ms)
        absent, _ = self._await_absence(0, timeout)
        return absent

    def if_present(self, consumer: Callable[[Any], Any], timeout_ms: Optional[int] = None) -> OptionalExecutor:
        """Run `consumer(element)` if the first element shows up within the timeout."""
        if not callable(consumer):
            raise TypeError("Cannot execute a non-callable consumer.")
        timeout = self._timeout_or_default(timeout_ms, self._timeout_ms)
        element = self.get(0)
        if not element.is_present(timeout):
            return OptionalExecutor(True)
        consumer(element)
        return OptionalExecutor(False)

    def if_not_present(self, action: Callable[[], Any], timeout_ms: Optional[int] = None) -> OptionalExecutor:
        """Run `action()` once no element matches within the not-present timeout."""
        if not callable(action):
            raise TypeError("Cannot execute a non-callable action.")
        if not self.is_not_present(timeout_ms):
            return OptionalExecutor(True)
        action()
        return OptionalExecutor(False)

    # ---------- Copies ----------

    def clone(
        self,
        *,
        wait: Optional[PatientWait] = _UNSET,
        timeout_ms: Optional[int] = _UNSET,
        not_present_timeout_ms: Optional[int] = _UNSET,
        element_filter: Optional[Callable[[Any], bool]] = _UNSET,
    ) -> "ElementLocator":
        """Copy with some settings overridden. The copy starts with an empty element memo."""
        return ElementLocator(
            self.description,
            self.config,
            self._supplier,
            wait=self._wait if wait is _UNSET else wait,
            timeout_ms=self._timeout_ms if timeout_ms is _UNSET else timeout_ms,
            not_present_timeout_ms=(
                self._not_present_timeout_ms if not_present_timeout_ms is _UNSET else not_present_timeout_ms
            ),
            element_filter=self._filter if element_filter is _UNSET else element_filter,
        )

    def with_wait(self, wait: PatientWait) -> "ElementLocator":
        if wait is None:
            raise ValueError("Cannot use a null wait.")
        return self.clone(wait=wait)

    def with_timeout(self, timeout_ms: int) -> "ElementLocator":
        return self.clone(timeout_ms=self._check_timeout(timeout_ms))

    def with_not_present_timeout(self, timeout_ms: int) -> "ElementLocator":
        return self.clone(not_present_timeout_ms=self._check_timeout(timeout_ms))

    def with_filter(self, element_filter: Callable[[Any], bool]) -> "ElementLocator":
        if element_filter is None:
            raise ValueError("Cannot use a null element filter.")
        return self.clone(element_filter=element_filter)
