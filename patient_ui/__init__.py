"""
patient_ui
----------
Patient, self-healing element resolution for page-object UI tests.
"""

from patient_ui.core.config import PatientConfig
from patient_ui.core.driver import PatientDriver
from patient_ui.core.element import PatientElement
from patient_ui.core.errors import (
    ConfigurationError,
    ElementNotFoundError,
    InitializationError,
    PatientError,
    StaleHandleError,
    UnwiredFieldError,
)
from patient_ui.core.locator import ElementLocator
from patient_ui.pages import PageObject, PageObjectInitializer, WidgetObject
from patient_ui.selectors import Find, FindByLocatorStrategy, Selector, SelectorStrategy
from patient_ui.utils.timing import PatientWait

__version__ = "0.1.0"

__all__ = [
    "PatientConfig",
    "PatientDriver",
    "PatientElement",
    "ElementLocator",
    "PatientWait",
    "PageObject",
    "WidgetObject",
    "PageObjectInitializer",
    "Find",
    "FindByLocatorStrategy",
    "Selector",
    "SelectorStrategy",
    "PatientError",
    "ElementNotFoundError",
    "StaleHandleError",
    "InitializationError",
    "ConfigurationError",
    "UnwiredFieldError",
]
