"""App-level settings record (supplier memory and display defaults)."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from eggledger.core.entities.inventory import EggVariant


class AppSettings(BaseModel):
    """Singleton settings document stored under ``app_settings/main``."""

    current_date: str = Field(default_factory=lambda: date.today().isoformat())
    is_first_launch: bool = True
    last_backup_date: datetime | None = None
    auto_backup_enabled: bool = True
    company_name: str = "Avícola Donna's"
    company_logo: str | None = None
    frequent_suppliers: list[str] = Field(default_factory=list)
    default_variant: EggVariant = EggVariant.ROSADO
    show_both_variants: bool = False

    def knows_supplier(self, name: str) -> bool:
        return name in self.frequent_suppliers

    def remember_supplier(self, name: str) -> bool:
        """Append ``name`` to the supplier memory. Returns True if it was new."""
        if not name or self.knows_supplier(name):
            return False
        self.frequent_suppliers.append(name)
        return True
