# patient_ui/selectors/locator.py
from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from patient_ui.utils.logger import get_logger

log = get_logger(__name__)

__all__ = ["SelectorStrategy", "Selector", "to_playwright_selector"]


class SelectorStrategy(str, Enum):
    id = "id"
    accessibility_id = "accessibility_id"
    ui_path = "ui_path"
    xpath = "xpath"
    css = "css"


class Selector(BaseModel):
    """
    An opaque (strategy, value) pair handed to the driver adapter.
    The engine never looks inside; adapters translate it for their driver.
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., description="Selector string, interpreted per strategy")
    strategy: SelectorStrategy = Field(default=SelectorStrategy.css)

    @field_validator("value")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("selector.value cannot be empty")
        return v

    def __str__(self) -> str:
        return f"{self.strategy.value}:{self.value}"

    @classmethod
    def css(cls, value: str) -> "Selector":
        return cls(value=value, strategy=SelectorStrategy.css)

    @classmethod
    def xpath(cls, value: str) -> "Selector":
        return cls(value=value, strategy=SelectorStrategy.xpath)

    @classmethod
    def id(cls, value: str) -> "Selector":
        return cls(value=value, strategy=SelectorStrategy.id)

    @classmethod
    def accessibility_id(cls, value: str) -> "Selector":
        return cls(value=value, strategy=SelectorStrategy.accessibility_id)

    @classmethod
    def ui_path(cls, value: str) -> "Selector":
        return cls(value=value, strategy=SelectorStrategy.ui_path)


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def to_playwright_selector(sel: Any) -> str:
    """
    Convert a Selector into a Playwright selector string.

    - css               -> css=<value>
    - xpath             -> xpath=<value>
    - id                -> id=<value>
    - accessibility_id  -> [aria-label="<value>"]
    - ui_path           -> passed through untouched, so any Playwright selector
                           chain works ("role=button[name='OK'] >> nth=0")

    Plain strings are passed through as-is.
    """
    if isinstance(sel, str):
        return sel
    if not isinstance(sel, Selector):
        raise TypeError(f"Unsupported selector type: {type(sel).__name__}")

    strategy = sel.strategy
    value = sel.value

    if strategy == SelectorStrategy.css:
        return f"css={value}"

    if strategy == SelectorStrategy.xpath:
        return f"xpath={value}"

    if strategy == SelectorStrategy.id:
        return f"id={value}"

    if strategy == SelectorStrategy.accessibility_id:
        return f"[aria-label={_quote(value)}]"

    log.debug(f"ui_path selector passed through to Playwright: {value!r}")
    return value
