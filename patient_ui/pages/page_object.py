# patient_ui/pages/page_object.py
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from patient_ui.core.errors import UnwiredFieldError

if TYPE_CHECKING:
    from patient_ui.core.driver import PatientDriver
    from patient_ui.core.locator import ElementLocator

__all__ = ["PageObject", "WidgetObject"]


class PageObject:
    """
    Base class for page objects. Declare locator slots with `Find(...)` and
    nested pages as attributes; a PageObjectInitializer wires them up.
    """

    # plain assignments, no annotations: annotations are what the initializer scans
    _driver = None
    _page_context = None

    @property
    def driver(self) -> "PatientDriver":
        if self._driver is None:
            raise UnwiredFieldError(
                f"{type(self).__name__} has not been initialized by a page object initializer."
            )
        return self._driver

    @property
    def page_context(self) -> Any:
        """The search context (driver or element) this page's locators were built from."""
        if self._page_context is None:
            raise UnwiredFieldError(
                f"{type(self).__name__} has not been initialized by a page object initializer."
            )
        return self._page_context

    @property
    def is_initialized(self) -> bool:
        return self._driver is not None


class WidgetObject(PageObject):
    """
    A page object representing one repeating UI fragment. Its locators search
    inside `base_element`, which is built from the field that declares the widget.
    """

    _base_element = None

    @property
    def base_element(self) -> "ElementLocator":
        if self._base_element is None:
            raise UnwiredFieldError(
                f"{type(self).__name__} has not been initialized by a page object initializer."
            )
        return self._base_element
