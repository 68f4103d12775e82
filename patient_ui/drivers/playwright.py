# patient_ui/drivers/playwright.py
from __future__ import annotations

"""Playwright adapter
---------------------
Implements the session/handle shapes from patient_ui.core.protocols on top of
playwright.sync_api. Playwright's "element is not attached" failures are
translated to StaleHandleError here, so the engine never inspects Playwright
exceptions itself.
"""

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from playwright.sync_api import Browser, ElementHandle, Page, Playwright, sync_playwright
from playwright.sync_api import Error as PlaywrightError

from patient_ui.core.errors import StaleHandleError
from patient_ui.selectors.locator import to_playwright_selector
from patient_ui.utils.config import Settings, get_settings
from patient_ui.utils.logger import get_logger

__all__ = ["PlaywrightHandle", "PlaywrightSession", "is_stale_error"]

log = get_logger(__name__)

_STALE_MARKERS = ("not attached", "detached", "element handle is disposed")


def is_stale_error(exc: BaseException) -> bool:
    msg = str(exc).lower()
    return any(m in msg for m in _STALE_MARKERS)


@contextmanager
def _stale_guard(what: str) -> Iterator[None]:
    try:
        yield
    except PlaywrightError as e:
        if is_stale_error(e):
            raise StaleHandleError(f"{what}: {e}") from e
        raise


class PlaywrightHandle:
    """One Playwright ElementHandle."""

    def __init__(self, handle: ElementHandle) -> None:
        self._handle = handle

    @property
    def raw(self) -> ElementHandle:
        return self._handle

    def find_children(self, selector: Any) -> List["PlaywrightHandle"]:
        with _stale_guard(f"find {selector}"):
            return [PlaywrightHandle(h) for h in self._handle.query_selector_all(to_playwright_selector(selector))]

    def click(self) -> None:
        with _stale_guard("click"):
            self._handle.click()

    def fill(self, text: str) -> None:
        with _stale_guard("fill"):
            self._handle.fill(text)

    def text(self) -> str:
        with _stale_guard("text"):
            return self._handle.inner_text()

    def is_displayed(self) -> bool:
        with _stale_guard("is_displayed"):
            return self._handle.is_visible()

    def get_attribute(self, name: str) -> Optional[str]:
        with _stale_guard(f"get_attribute {name}"):
            return self._handle.get_attribute(name)

    def __repr__(self) -> str:
        return f"<PlaywrightHandle {self._handle!r}>"


class PlaywrightSession:
    """
    A Playwright page as an automation session.

    Use `PlaywrightSession.launch()` as the session supplier of a PatientDriver:

        driver = PatientDriver(lambda: PlaywrightSession.launch("https://example.com"))
    """

    def __init__(self, page: Page, *, browser: Optional[Browser] = None, playwright: Optional[Playwright] = None) -> None:
        self._page = page
        self._browser = browser
        self._playwright = playwright

    @classmethod
    def launch(
        cls,
        url: Optional[str] = None,
        *,
        settings: Optional[Settings] = None,
        headless: Optional[bool] = None,
    ) -> "PlaywrightSession":
        s = settings or get_settings()
        pw = sync_playwright().start()
        browser_type = pw.chromium if s.BROWSER_TYPE.value == "chromium" else (pw.firefox if s.BROWSER_TYPE.value == "firefox" else pw.webkit)
        launch_kwargs = s.playwright_launch_kwargs(headless)
        browser = browser_type.launch(**launch_kwargs)
        page = browser.new_page()
        log.info(f"Launched {s.BROWSER_TYPE.value} (headless={launch_kwargs['headless']})")
        session = cls(page, browser=browser, playwright=pw)
        if url:
            session.goto(url, timeout_ms=s.PAGE_LOAD_TIMEOUT)
        return session

    @property
    def page(self) -> Page:
        return self._page

    def goto(self, url: str, timeout_ms: Optional[int] = None) -> None:
        timeout = timeout_ms if timeout_ms is not None else get_settings().PAGE_LOAD_TIMEOUT
        self._page.goto(url, wait_until="domcontentloaded", timeout=timeout)

    def find_children(self, selector: Any) -> List[PlaywrightHandle]:
        with _stale_guard(f"find {selector}"):
            return [PlaywrightHandle(h) for h in self._page.query_selector_all(to_playwright_selector(selector))]

    def window_count(self) -> int:
        return len(self._page.context.pages)

    def execute_script(self, script: str, *args: Any) -> Any:
        if not args:
            return self._page.evaluate(script)
        return self._page.evaluate(script, args[0] if len(args) == 1 else list(args))

    def close(self) -> None:
        """Close the current page and switch to the most recent remaining one, if any."""
        context = self._page.context
        self._page.close()
        remaining = context.pages
        if remaining:
            self._page = remaining[-1]

    def quit(self) -> None:
        if self._browser is not None:
            self._browser.close()
        else:
            self._page.context.close()
        if self._playwright is not None:
            self._playwright.stop()
