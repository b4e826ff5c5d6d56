"""Movement (cargo entry) entity."""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from eggledger.core.entities.inventory import EggVariant, FrozenInventory, WeightedInventory
from eggledger.core.exceptions import InvalidInputError


class MovementKind(str, Enum):
    """Types of inventory movements."""

    INCOMING = "incoming"
    OUTGOING = "outgoing"
    ADJUSTMENT = "adjustment"
    DAY_CLOSE = "dayClose"

    @property
    def display_name(self) -> str:
        return _KIND_DISPLAY_NAMES[self]


_KIND_DISPLAY_NAMES = {
    MovementKind.INCOMING: "Incoming load",
    MovementKind.OUTGOING: "Outgoing",
    MovementKind.ADJUSTMENT: "Adjustment",
    MovementKind.DAY_CLOSE: "Day close",
}


def validate_date_key(value: str, field: str = "date") -> str:
    """Ensure ``value`` is a ``YYYY-MM-DD`` business date key."""
    try:
        parsed = date.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidInputError(field, "expected a YYYY-MM-DD date", value) from None
    if parsed.isoformat() != value:
        raise InvalidInputError(field, "expected a YYYY-MM-DD date", value)
    return value


class Movement(BaseModel):
    """Immutable record of one inventory-affecting event."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    date: str
    kind: MovementKind
    supplier: str
    rosado_packages: FrozenInventory = Field(default_factory=FrozenInventory)
    pardo_packages: FrozenInventory = Field(default_factory=FrozenInventory)
    notes: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("date")
    @classmethod
    def check_date(cls, v: str) -> str:
        return validate_date_key(v)

    @field_validator("rosado_packages", "pardo_packages", mode="before")
    @classmethod
    def freeze_inventory(cls, v: object) -> object:
        # Snapshot the caller's inventory; later changes to it do not reach the movement
        if isinstance(v, WeightedInventory):
            return FrozenInventory.of(v)
        return v

    @property
    def total_packages(self) -> int:
        return self.rosado_packages.total_count + self.pardo_packages.total_count

    @property
    def total_weight(self) -> float:
        return self.rosado_packages.total_weight + self.pardo_packages.total_weight

    def inventory(self, variant: EggVariant) -> WeightedInventory:
        """Copy of the delta recorded for ``variant``."""
        source = self.rosado_packages if variant is EggVariant.ROSADO else self.pardo_packages
        return source.copy()

    def has_variant(self, variant: EggVariant) -> bool:
        return self.inventory(variant).has_stock()

    def with_id(self, movement_id: str) -> "Movement":
        return self.model_copy(update={"id": movement_id})
