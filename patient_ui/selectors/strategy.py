# patient_ui/selectors/strategy.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from patient_ui.core.errors import ConfigurationError, UnwiredFieldError
from patient_ui.core.locator import ElementLocator
from patient_ui.core.protocols import FindsElements
from patient_ui.selectors.locator import Selector, SelectorStrategy
from patient_ui.utils.logger import get_logger

log = get_logger(__name__)

__all__ = ["Find", "FieldRef", "FieldLocatorStrategy", "FindByLocatorStrategy"]


class Find:
    """
    Declares a locator slot on a page object:

        class LoginPage(PageObject):
            username = Find(id="username")
            submit = Find(css="button[type=submit]", timeout_ms=5000)

    Exactly one strategy must be given; that is checked when the page is
    initialized. Until then, reading the attribute from an instance raises.
    """

    def __init__(
        self,
        *,
        css: Optional[str] = None,
        xpath: Optional[str] = None,
        id: Optional[str] = None,
        accessibility_id: Optional[str] = None,
        ui_path: Optional[str] = None,
        timeout_ms: Optional[int] = None,
    ) -> None:
        self._values: Dict[SelectorStrategy, Optional[str]] = {
            SelectorStrategy.css: css,
            SelectorStrategy.xpath: xpath,
            SelectorStrategy.id: id,
            SelectorStrategy.accessibility_id: accessibility_id,
            SelectorStrategy.ui_path: ui_path,
        }
        self.timeout_ms = timeout_ms
        self.name: Optional[str] = None
        self.owner: Optional[type] = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.owner = owner
        self.name = name

    def __get__(self, instance: Any, owner: type) -> Any:
        if instance is None:
            return self
        raise UnwiredFieldError(
            f"{owner.__name__}.{self.name} has not been initialized by a page object initializer."
        )

    def selector(self) -> Selector:
        chosen = [(s, v) for s, v in self._values.items() if v is not None]
        where = f"{self.owner.__name__}.{self.name}" if self.owner else "Find"
        if len(chosen) != 1:
            names = ", ".join(s.value for s, _ in chosen) or "none"
            raise ConfigurationError(f"{where} must use exactly one selector strategy, got: {names}")
        if self.timeout_ms is not None and self.timeout_ms < 0:
            raise ConfigurationError(f"{where} has a negative timeout_ms")
        strategy, value = chosen[0]
        try:
            return Selector(value=value, strategy=strategy)
        except ValueError as e:
            raise ConfigurationError(f"{where}: {e}") from e

    def __repr__(self) -> str:
        parts = [f"{s.value}={v!r}" for s, v in self._values.items() if v is not None]
        if self.timeout_ms is not None:
            parts.append(f"timeout_ms={self.timeout_ms}")
        return f"Find({', '.join(parts)})"


@dataclass(frozen=True)
class FieldRef:
    """One declared field on a page object class."""
    owner: type
    name: str
    find: Optional[Find] = None
    type_hint: Optional[type] = None

    def __str__(self) -> str:
        return f"{self.owner.__name__}.{self.name}"


class FieldLocatorStrategy:
    """
    Builds the locator for one page-object field.

    `path` lists the fields from the outermost page object down to the field
    being initialized (last entry). Return None to leave the field alone.
    """

    def build_locator(self, context: FindsElements, path: Sequence[FieldRef]) -> Optional[ElementLocator]:
        raise NotImplementedError


class FindByLocatorStrategy(FieldLocatorStrategy):
    """Default strategy: derive the locator from the field's `Find` declaration."""

    def build_locator(self, context: FindsElements, path: Sequence[FieldRef]) -> Optional[ElementLocator]:
        if not path:
            raise ValueError("Cannot build a locator without a field path.")
        ref = path[-1]
        if ref.find is None:
            return None
        locator = context.find(ref.find.selector())
        if ref.find.timeout_ms is not None:
            locator = locator.with_timeout(ref.find.timeout_ms)
        log.debug(f"{' -> '.join(str(r) for r in path)} bound to {locator}")
        return locator
