# patient_ui/core/base.py
from __future__ import annotations

from patient_ui.core.config import PatientConfig


class PatientBase:
    """Description + config shared by drivers, locators and elements."""

    def __init__(self, description: str, config: PatientConfig) -> None:
        if not description:
            raise ValueError("Cannot use a null or empty description.")
        if not isinstance(config, PatientConfig):
            raise TypeError("Cannot use a config that is not a PatientConfig.")
        self._description = description
        self._config = config

    @property
    def description(self) -> str:
        return self._description

    @property
    def config(self) -> PatientConfig:
        return self._config

    def __str__(self) -> str:
        return self._description

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._description}>"
