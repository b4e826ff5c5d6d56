"""Daily stock aggregate with its open/closed lifecycle."""

from datetime import UTC, datetime
from typing import NamedTuple

from pydantic import BaseModel, Field, computed_field, field_validator

from eggledger.core.entities.inventory import (
    EggVariant,
    SubtractResult,
    WeightedInventory,
)
from eggledger.core.entities.movement import validate_date_key


def _now() -> datetime:
    return datetime.now(UTC)


class StockTotals(NamedTuple):
    total_packages: int
    total_weight: float


class DailyStock(BaseModel):
    """Current inventory for one business date.

    Totals are derived from the two variant inventories on every read, so no
    mutation path can leave them stale. Mutations go through the ``apply_*``
    and ``replace_variant`` methods, which stamp ``updated_at``.
    """

    date: str
    rosado_packages: WeightedInventory = Field(default_factory=WeightedInventory)
    pardo_packages: WeightedInventory = Field(default_factory=WeightedInventory)
    is_closed: bool = False
    is_current_day: bool = False
    closed_at: datetime | None = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    @field_validator("date")
    @classmethod
    def check_date(cls, v: str) -> str:
        return validate_date_key(v)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_packages(self) -> int:
        return self.rosado_packages.total_count + self.pardo_packages.total_count

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_weight(self) -> float:
        return self.rosado_packages.total_weight + self.pardo_packages.total_weight

    @property
    def is_open(self) -> bool:
        return not self.is_closed

    def recompute_totals(self) -> StockTotals:
        """Return the derived totals and stamp ``updated_at``."""
        self.updated_at = _now()
        return StockTotals(self.total_packages, self.total_weight)

    def _variant(self, variant: EggVariant) -> WeightedInventory:
        if variant is EggVariant.ROSADO:
            return self.rosado_packages
        return self.pardo_packages

    def inventory(self, variant: EggVariant) -> WeightedInventory:
        """Copy of the current inventory for ``variant``."""
        return self._variant(variant).copy()

    def apply_incoming(self, variant: EggVariant, delta: WeightedInventory) -> None:
        self._variant(variant).add(delta)
        self.recompute_totals()

    def apply_outgoing(self, variant: EggVariant, delta: WeightedInventory) -> SubtractResult:
        result = self._variant(variant).subtract(delta)
        self.recompute_totals()
        return result

    def replace_variant(self, variant: EggVariant, inventory: WeightedInventory) -> None:
        if variant is EggVariant.ROSADO:
            self.rosado_packages = inventory.copy()
        else:
            self.pardo_packages = inventory.copy()
        self.recompute_totals()

    def close(self, now: datetime | None = None) -> None:
        """Open -> Closed."""
        self.is_closed = True
        self.is_current_day = False
        self.closed_at = now or _now()
        self.recompute_totals()

    def reopen(self, is_today: bool) -> None:
        """Closed -> Open. Only today's stock becomes the current day again."""
        self.is_closed = False
        self.closed_at = None
        if is_today:
            self.is_current_day = True
        self.recompute_totals()
