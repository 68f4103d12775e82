"""
Core package: config, caches, locators, elements and the driver.
Lightweight package init to avoid import cycles.

Consumers should import submodules directly, e.g.:
  from patient_ui.core.locator import ElementLocator
  from patient_ui.core.errors import ElementNotFoundError
"""

__all__: list[str] = []
