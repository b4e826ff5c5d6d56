"""Configuration module."""

from eggledger.config.logging import configure_logging, get_logger
from eggledger.config.settings import (
    LedgerSettings,
    ReportSettings,
    Settings,
    get_settings,
    reset_settings,
)

__all__ = [
    "Settings",
    "LedgerSettings",
    "ReportSettings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    "get_logger",
]
