"""Process-wide settings for the incident risk services."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

ENV_PREFIX = "INCIDENT_RISK_"


@dataclass(slots=True)
class Settings:
    """Container object for application configuration.

    Values are read from ``INCIDENT_RISK_*`` environment variables when the
    settings are built with :meth:`from_env`; anything unset keeps the
    defaults below.
    """

    # Storage
    ARTIFACT_ROOT: Path = Path("storage")

    # Feature encoding
    MAX_CATEGORIES: int = 256

    # Training defaults
    DEFAULT_LEARNING_RATE: float = 0.3
    DEFAULT_ITERATIONS: int = 600
    DEFAULT_VALIDATION_SPLIT: float = 0.2

    # Logging
    LOG_LEVEL: str = "INFO"

    def validate(self) -> None:
        if self.MAX_CATEGORIES <= 0:
            raise ValueError("MAX_CATEGORIES must be positive")
        if not self.LOG_LEVEL:
            raise ValueError("LOG_LEVEL must not be empty")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        environ = os.environ if environ is None else environ
        settings = cls()
        converters = {
            "ARTIFACT_ROOT": Path,
            "MAX_CATEGORIES": int,
            "DEFAULT_LEARNING_RATE": float,
            "DEFAULT_ITERATIONS": int,
            "DEFAULT_VALIDATION_SPLIT": float,
            "LOG_LEVEL": str.upper,
        }
        for name, convert in converters.items():
            raw = environ.get(f"{ENV_PREFIX}{name}")
            if raw is None or not raw.strip():
                continue
            setattr(settings, name, convert(raw.strip()))

        settings.validate()
        return settings


# Global settings instance used throughout the backend
settings = Settings.from_env()


def get_settings() -> Settings:
    """Return the global settings instance."""

    return settings
