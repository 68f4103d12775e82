# patient_ui/core/driver.py
from __future__ import annotations

"""Patient driver
-----------------
Root of the locate tree. Holds the (lazily acquired) automation session and
drops it again when the session is gone.
"""

from typing import Any, Callable, Optional, TypeVar

from patient_ui.core.base import PatientBase
from patient_ui.core.cache import CacheState, CachingExecutor
from patient_ui.core.config import PatientConfig
from patient_ui.core.locator import ElementLocator
from patient_ui.core.protocols import Session
from patient_ui.utils.logger import get_logger

R = TypeVar("R")

__all__ = ["PatientDriver"]

log = get_logger(__name__)


class PatientDriver(PatientBase):
    """
    Wraps a session supplier (e.g. "launch a browser and open a page").

    The session is requested on first use and reused until `quit()`, or a
    `close()` of the last window, clears it; the next use acquires a new one.

        with PatientDriver(lambda: PlaywrightSession.launch()) as driver:
            driver.find(Selector.css("#login")).get().click()
    """

    def __init__(
        self,
        session_supplier: Callable[[], Session],
        config: Optional[PatientConfig] = None,
        description: str = "driver",
    ) -> None:
        super().__init__(description, config if config is not None else PatientConfig.from_settings())
        self._executor: CachingExecutor[Session] = CachingExecutor(session_supplier)

    def with_wrapped_session(self) -> CachingExecutor[Session]:
        """Escape hatch: the executor holding the raw session."""
        return self._executor

    @property
    def has_session(self) -> bool:
        return self._executor.state is CacheState.CACHED

    def apply(self, fn: Callable[[Session], R]) -> R:
        return self._executor.apply(fn)

    def accept(self, fn: Callable[[Session], Any]) -> None:
        self._executor.accept(fn)

    def find(self, selector: Any) -> ElementLocator:
        if selector is None:
            raise ValueError("Cannot find elements with a null selector.")
        return ElementLocator(
            f"{self}.find({selector})",
            self.config,
            lambda: self.apply(lambda s: s.find_children(selector)),
        )

    def execute_script(self, script: str, *args: Any) -> Any:
        if not script:
            raise ValueError("Cannot execute a null or empty script.")
        return self.apply(lambda s: s.execute_script(script, *args))

    # ---------- Lifecycle ----------

    def quit(self) -> None:
        """End the session (if one was acquired) and forget it."""
        try:
            if self.has_session:
                self.accept(lambda s: s.quit())
                log.info(f"{self}: session quit")
        finally:
            self._executor.clear()

    def close(self) -> None:
        """Close the current window; forget the session if it was the last one."""
        windows = self.apply(lambda s: s.window_count())
        self.accept(lambda s: s.close())
        if windows <= 1:
            self._executor.clear()
            log.info(f"{self}: last window closed, session released")

    def __enter__(self) -> "PatientDriver":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.quit()
