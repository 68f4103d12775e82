# patient_ui/pages/initializer.py
from __future__ import annotations

"""Page object initializer
--------------------------
Walks a page-object graph and fills in every declared locator slot, nesting
into child page objects. Each object is wired once per `initialize()` call,
so shared and cyclic references are fine.
"""

import types
from typing import Any, List, Optional, Set, Tuple, Union, get_args, get_origin, get_type_hints

from patient_ui.core.driver import PatientDriver
from patient_ui.core.errors import InitializationError
from patient_ui.core.locator import ElementLocator
from patient_ui.core.protocols import FindsElements
from patient_ui.pages.page_object import PageObject, WidgetObject
from patient_ui.selectors.strategy import FieldLocatorStrategy, FieldRef, Find, FindByLocatorStrategy
from patient_ui.utils.logger import get_logger

__all__ = ["PageObjectInitializer", "declared_fields"]

log = get_logger(__name__)

_INTERNAL = frozenset({"_driver", "_page_context", "_base_element"})

Path = Tuple[FieldRef, ...]


def _page_type(hint: Any) -> Optional[type]:
    """PageObject subclass named by an annotation (unwrapping Optional[...]), else None."""
    if isinstance(hint, type):
        return hint if issubclass(hint, PageObject) else None
    if get_origin(hint) in (Union, types.UnionType):
        args = [a for a in get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return _page_type(args[0])
    return None


def _is_locator_type(hint: Any) -> bool:
    if isinstance(hint, type):
        return issubclass(hint, ElementLocator)
    if get_origin(hint) in (Union, types.UnionType):
        args = [a for a in get_args(hint) if a is not type(None)]
        return len(args) == 1 and _is_locator_type(args[0])
    return False


def declared_fields(cls: type) -> List[FieldRef]:
    """
    Fields the initializer cares about, most-derived class first:
      - attributes declared as `Find(...)`
      - annotations naming a PageObject subclass (nested pages / widgets)
      - annotations naming ElementLocator without a `Find` (left to the strategy)

    A subclass that re-binds a name to something else hides the base declaration.
    """
    try:
        hints = get_type_hints(cls)
    except (NameError, TypeError, AttributeError) as e:
        raise InitializationError(f"Cannot resolve the annotations of {cls.__name__}: {e}") from e

    seen: Set[str] = set()
    refs: List[FieldRef] = []
    for klass in cls.__mro__:
        if klass is object:
            continue
        for name, value in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if isinstance(value, Find):
                refs.append(FieldRef(owner=klass, name=name, find=value, type_hint=_page_type(hints.get(name))))

    declared = {r.name for r in refs}
    for name, hint in hints.items():
        if name in declared or name in _INTERNAL:
            continue
        page_type = _page_type(hint)
        if page_type is not None:
            refs.append(FieldRef(owner=cls, name=name, type_hint=page_type))
        elif _is_locator_type(hint):
            refs.append(FieldRef(owner=cls, name=name))
    return refs


class PageObjectInitializer:
    """
    Wires page objects to a driver.

        driver = PatientDriver(session_supplier)
        page = PageObjectInitializer(driver).initialize(LoginPage())
        page.submit.get().click()

    `strategy` decides how a declared field becomes a locator; the default
    reads its `Find(...)` declaration.
    """

    def __init__(self, driver: PatientDriver, strategy: Optional[FieldLocatorStrategy] = None) -> None:
        if driver is None:
            raise ValueError("Cannot use a null patient driver.")
        self._driver = driver
        self._strategy = strategy if strategy is not None else FindByLocatorStrategy()

    @property
    def driver(self) -> PatientDriver:
        return self._driver

    @property
    def strategy(self) -> FieldLocatorStrategy:
        return self._strategy

    def initialize(self, page: PageObject, page_context: Optional[FindsElements] = None) -> PageObject:
        """
        Fill every unset locator slot of `page` and, recursively, of its nested
        page objects. `page_context` defaults to the driver.
        """
        if page is None:
            raise ValueError("Cannot use a null page.")
        if not isinstance(page, PageObject):
            raise InitializationError(f"{type(page).__name__} is not a PageObject.")
        context = page_context if page_context is not None else self._driver
        visited: Set[int] = set()
        self._initialize_page(context, page, (), visited)
        log.debug(f"Initialized {type(page).__name__} ({len(visited)} page object(s))")
        return page

    # ---------- Internals ----------

    @staticmethod
    def _set(obj: Any, name: str, value: Any) -> None:
        try:
            setattr(obj, name, value)
        except (AttributeError, TypeError) as e:
            raise InitializationError(
                f"Error setting the value of the field {name} on {type(obj).__name__}: {e}"
            ) from e

    @staticmethod
    def _current_value(obj: Any, name: str) -> Any:
        try:
            instance_vars = vars(obj)
        except TypeError as e:
            raise InitializationError(f"Cannot read the fields of {type(obj).__name__}: {e}") from e
        if name in instance_vars:
            return instance_vars[name]
        for klass in type(obj).__mro__:
            if name in vars(klass):
                value = vars(klass)[name]
                return None if isinstance(value, Find) else value
        return None

    @staticmethod
    def _instantiate(ref: FieldRef) -> PageObject:
        try:
            return ref.type_hint()  # type: ignore[misc]
        except TypeError as e:
            raise InitializationError(
                f"Cannot create {ref.type_hint.__name__} for {ref}: page objects need a no-argument constructor"
            ) from e

    def _initialize_page(self, context: FindsElements, page: PageObject, path: Path, visited: Set[int]) -> None:
        if id(page) in visited:
            return
        visited.add(id(page))

        self._set(page, "_driver", self._driver)
        child_context = context
        if isinstance(page, WidgetObject):
            if not path:
                raise InitializationError(
                    f"{type(page).__name__} is a widget; initialize the page object that declares it instead"
                )
            base = self._strategy.build_locator(context, path)
            if base is None:
                raise InitializationError(f"No base element could be built for the widget at {path[-1]}")
            self._set(page, "_base_element", base)
            child_context = base.get()
        self._set(page, "_page_context", child_context)

        refs = declared_fields(type(page))
        for ref in refs:
            current = self._current_value(page, ref.name)
            field_path = path + (ref,)
            if ref.type_hint is not None:
                if current is None:
                    current = self._instantiate(ref)
                    self._set(page, ref.name, current)
                if isinstance(current, PageObject):
                    self._initialize_page(child_context, current, field_path, visited)
            elif current is None:
                locator = self._strategy.build_locator(child_context, field_path)
                if locator is not None:
                    self._set(page, ref.name, locator)

        # nested page objects assigned in __init__ without a declaration
        declared = {r.name for r in refs}
        for name, value in list(vars(page).items()):
            if name in declared or name in _INTERNAL or not isinstance(value, PageObject):
                continue
            ref = FieldRef(owner=type(page), name=name, type_hint=type(value))
            self._initialize_page(child_context, value, path + (ref,), visited)
