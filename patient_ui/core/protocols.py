# patient_ui/core/protocols.py
from __future__ import annotations

"""Driver-collaborator boundary
-------------------------------
Shapes the engine expects from an automation driver. Adapters (see
patient_ui.drivers) implement these; nothing here talks to a browser.

Adapters must raise StaleHandleError for handles that are no longer attached,
and return an empty list (not raise) when a selector matches nothing.
"""

from typing import TYPE_CHECKING, Any, List, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from patient_ui.core.locator import ElementLocator

__all__ = ["SearchScope", "Handle", "Session", "FindsElements"]


@runtime_checkable
class SearchScope(Protocol):
    def find_children(self, selector: Any) -> List[Any]:
        ...


@runtime_checkable
class Handle(SearchScope, Protocol):
    def click(self) -> None:
        ...

    def fill(self, text: str) -> None:
        ...

    def text(self) -> str:
        ...

    def is_displayed(self) -> bool:
        ...

    def get_attribute(self, name: str) -> Optional[str]:
        ...


@runtime_checkable
class Session(SearchScope, Protocol):
    def quit(self) -> None:
        ...

    def close(self) -> None:
        ...

    def window_count(self) -> int:
        ...

    def execute_script(self, script: str, *args: Any) -> Any:
        ...


@runtime_checkable
class FindsElements(Protocol):
    """A search context: the driver, or an element narrowing the search to its children."""

    def find(self, selector: Any) -> "ElementLocator":
        ...
