"""
Selectors package
-----------------
Selector values, their translation for Playwright, and the `Find`
declarations page objects use to name their locator slots.
"""

from .locator import Selector, SelectorStrategy, to_playwright_selector
from .strategy import FieldLocatorStrategy, FieldRef, Find, FindByLocatorStrategy

__all__ = [
    "Selector",
    "SelectorStrategy",
    "to_playwright_selector",
    "Find",
    "FieldRef",
    "FieldLocatorStrategy",
    "FindByLocatorStrategy",
]
