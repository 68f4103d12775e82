"""
Driver adapters. Import the one you need directly so its driver library is
only required when used:
  from patient_ui.drivers.playwright import PlaywrightSession
"""

__all__: list[str] = []
