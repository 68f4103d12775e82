# patient_ui/core/optional.py
from __future__ import annotations

from typing import Any, Callable


class OptionalExecutor:
    """
    Returned by `if_present` / `if_not_present`.

        locator.if_present(lambda e: e.click()).otherwise(lambda: log.info("no banner"))
    """

    def __init__(self, execute_other: bool) -> None:
        self._execute_other = execute_other

    @property
    def executes_other(self) -> bool:
        return self._execute_other

    def otherwise(self, fn: Callable[[], Any]) -> None:
        if not callable(fn):
            raise TypeError("Cannot execute a non-callable.")
        if self._execute_other:
            fn()
