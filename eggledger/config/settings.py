"""
Egg Ledger configuration.

Each concern reads its own environment prefix (``LEDGER_``, ``REPORT_``,
``STORAGE_``, ``API_``); top-level fields such as ``ENVIRONMENT`` and
``LOG_LEVEL`` are unprefixed and may also come from ``.env``.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LEDGER_")

    # Supplier recorded on movements the ledger generates itself
    system_supplier: str = "Sistema"
    close_day_note: str = "Automatic day close"
    adjustment_note: str = "Manual inventory correction"


class ReportSettings(BaseSettings):
    """Thresholds used when analysing a report period."""

    model_config = SettingsConfigDict(env_prefix="REPORT_")

    trend_window: int = Field(default=3, ge=1, description="Days compared at each end of the series")
    trend_threshold: float = Field(default=0.10, ge=0.0, lt=1.0)
    dominance_threshold: float = Field(default=70.0, gt=0.0, le=100.0)
    top_suppliers: int = Field(default=5, ge=1)
    # More suppliers than this triggers the consolidation recommendation
    supplier_consolidation_limit: int = Field(default=5, ge=1)


class StorageSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    backend: Literal["sqlite", "memory"] = "sqlite"
    data_dir: Path = Path("data")
    db_name: str = "eggledger.db"
    pool_size: int = Field(default=5, ge=1)
    busy_timeout: int = Field(default=30000, ge=0, description="Milliseconds")

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class APISettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Egg Ledger"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    report: ReportSettings = Field(default_factory=ReportSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def ensure_data_dir(self) -> "Settings":
        if self.storage.backend == "sqlite":
            self.storage.data_dir.mkdir(parents=True, exist_ok=True)
        return self


_settings: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, loaded from the environment on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
