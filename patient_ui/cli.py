# patient_ui/cli.py
from __future__ import annotations

"""Command-line interface
------------------------
Print the effective settings, or check a live page with a selector using the
patient engine (handy for checking a selector before putting it in a page object).
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click

from patient_ui.core.config import PatientConfig
from patient_ui.core.driver import PatientDriver
from patient_ui.core.errors import ConfigurationError
from patient_ui.selectors.strategy import Find
from patient_ui.utils.config import get_settings
from patient_ui.utils.logger import get_logger, set_log_level


# -------- helpers --------


def _echo_json(obj) -> None:
    click.echo(json.dumps(obj, indent=2, ensure_ascii=False))


def _open_session(url: str, headless: Optional[bool]):
    # local import: Playwright is only needed for `check`
    from patient_ui.drivers.playwright import PlaywrightSession

    return PlaywrightSession.launch(url, headless=headless)


# -------- CLI root --------


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override LOG_LEVEL from settings",
)
@click.version_option(package_name="patient-ui")
def cli(log_level: Optional[str]):
    _ = get_settings()
    if log_level:
        set_log_level(log_level.upper())


# -------- commands --------


@cli.command("config")
def cmd_config():
    """Print effective configuration (after .env & env vars)."""
    s = get_settings()
    data = {k: (str(v) if isinstance(v, Path) else (v.value if hasattr(v, "value") else v)) for k, v in s.model_dump().items()}
    _echo_json(data)


@cli.command("check")
@click.argument("url")
@click.option("--css", default=None, help="CSS selector")
@click.option("--xpath", default=None, help="XPath expression")
@click.option("--id", "id_", default=None, help="Element id")
@click.option("--accessibility-id", default=None, help="Accessible name (aria-label)")
@click.option("--ui-path", default=None, help="Raw Playwright selector chain")
@click.option("--timeout-ms", type=int, default=None, help="Override PRESENT_TIMEOUT_MS for this check")
@click.option("--headless/--headed", default=None, help="Override HEADLESS from settings")
def cmd_check(
    url: str,
    css: Optional[str],
    xpath: Optional[str],
    id_: Optional[str],
    accessibility_id: Optional[str],
    ui_path: Optional[str],
    timeout_ms: Optional[int],
    headless: Optional[bool],
):
    """
    Open URL and wait for a selector. Exit code 0 when it is present.

    Examples:
      patient-ui check https://example.com --css h1
      patient-ui check https://example.com --xpath "//a" --timeout-ms 2000
    """
    log = get_logger(__name__)
    find = Find(css=css, xpath=xpath, id=id_, accessibility_id=accessibility_id, ui_path=ui_path, timeout_ms=timeout_ms)
    try:
        selector = find.selector()
    except ConfigurationError as e:
        click.echo(f"ERR {e}")
        sys.exit(2)

    config = PatientConfig.from_settings()
    driver = PatientDriver(lambda: _open_session(url, headless), config=config, description="check")
    try:
        locator = driver.find(selector)
        if timeout_ms is not None:
            locator = locator.with_timeout(timeout_ms)
        elements = locator.get_all()
        present = bool(elements)
        log.debug(f"check {selector} on {url}: {len(elements)} match(es)")
        _echo_json({
            "url": url,
            "selector": str(selector),
            "present": present,
            "count": len(elements),
            "timeout_ms": locator.timeout_ms,
        })
    finally:
        driver.quit()

    sys.exit(0 if present else 1)


def main() -> None:
    cli(prog_name="patient-ui")


if __name__ == "__main__":
    main()
