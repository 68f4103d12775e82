"""
Page objects package
--------------------
Base classes for page/widget objects and the initializer that wires them.
"""

from .page_object import PageObject, WidgetObject
from .initializer import PageObjectInitializer, declared_fields

__all__ = [
    "PageObject",
    "WidgetObject",
    "PageObjectInitializer",
    "declared_fields",
]
