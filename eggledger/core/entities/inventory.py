"""Weight-bucketed package inventory."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from eggledger.core.exceptions import InvalidInputError

# Integer kilogram package sizes, each split into tenths (x.0 .. x.9)
WEIGHT_CLASSES: tuple[int, ...] = (7, 8, 9, 10, 11, 12, 13)
SUB_BUCKETS = 10


class EggVariant(str, Enum):
    """Product lines tracked with parallel inventories."""

    ROSADO = "rosado"
    PARDO = "pardo"

    @property
    def display_name(self) -> str:
        return "Rosado egg" if self is EggVariant.ROSADO else "Pardo egg"


def _empty_counts() -> list[list[int]]:
    return [[0] * SUB_BUCKETS for _ in WEIGHT_CLASSES]


def _class_index(weight: int) -> int:
    if weight not in WEIGHT_CLASSES:
        raise InvalidInputError(
            "weight",
            f"weight class must be between {WEIGHT_CLASSES[0]} and {WEIGHT_CLASSES[-1]} kg",
            weight,
        )
    return weight - WEIGHT_CLASSES[0]


def _check_counters(weight: int, counters: Sequence[int]) -> list[int]:
    if len(counters) != SUB_BUCKETS:
        raise InvalidInputError(
            f"kg{weight}",
            f"expected {SUB_BUCKETS} counters, got {len(counters)}",
            list(counters),
        )
    checked = []
    for value in counters:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidInputError(f"kg{weight}", "counters must be integers", value)
        if value < 0:
            raise InvalidInputError(f"kg{weight}", "counters cannot be negative", value)
        checked.append(value)
    return checked


def _check_shape(rows: Sequence[Sequence[int]]) -> list[list[int]]:
    if len(rows) != len(WEIGHT_CLASSES):
        raise InvalidInputError(
            "counts", f"expected {len(WEIGHT_CLASSES)} weight classes, got {len(rows)}"
        )
    return [_check_counters(w, row) for w, row in zip(WEIGHT_CLASSES, rows)]


@dataclass
class SubtractResult:
    """Outcome of a clamped subtraction.

    ``shortfall`` holds, per counter, how much of the requested delta could
    not be removed because the stock would have gone below zero.
    """

    shortfall: "WeightedInventory"

    @property
    def shortfall_count(self) -> int:
        return self.shortfall.total_count

    @property
    def clamped(self) -> bool:
        return self.shortfall.has_stock()


class WeightedInventory(BaseModel):
    """Package counts for weight classes 7..13 kg, ten tenths buckets each.

    Counters are never negative. The tenths bucket is bookkeeping only:
    ``total_weight`` uses the integer class weight for every package.
    """

    counts: list[list[int]] = Field(default_factory=_empty_counts)

    @field_validator("counts")
    @classmethod
    def validate_shape(cls, v: list[list[int]]) -> list[list[int]]:
        return _check_shape(v)

    @classmethod
    def from_classes(cls, classes: Mapping[int, Sequence[int]]) -> "WeightedInventory":
        """Build from a sparse ``{weight: counters}`` mapping."""
        inventory = cls()
        for weight, counters in classes.items():
            inventory.set_for_class(int(weight), counters)
        return inventory

    @property
    def total_count(self) -> int:
        return sum(sum(row) for row in self.counts)

    @property
    def total_weight(self) -> float:
        return float(sum(w * sum(row) for w, row in zip(WEIGHT_CLASSES, self.counts)))

    def total_for_class(self, weight: int) -> int:
        return sum(self.counts[_class_index(weight)])

    def packages_for_class(self, weight: int) -> list[int]:
        """Copy of the ten tenths counters for one weight class."""
        return list(self.counts[_class_index(weight)])

    def set_for_class(self, weight: int, counters: Sequence[int]) -> None:
        index = _class_index(weight)
        self.counts[index] = _check_counters(weight, counters)

    def add(self, other: "WeightedInventory") -> "WeightedInventory":
        """Element-wise add ``other`` into this inventory. Returns self."""
        for row, delta in zip(self.counts, other.counts):
            for i in range(SUB_BUCKETS):
                row[i] += delta[i]
        return self

    def subtract(self, other: "WeightedInventory") -> SubtractResult:
        """Element-wise subtract, flooring every counter at zero."""
        shortfall = WeightedInventory()
        for row, delta, short in zip(self.counts, other.counts, shortfall.counts):
            for i in range(SUB_BUCKETS):
                remaining = row[i] - delta[i]
                if remaining < 0:
                    short[i] = -remaining
                    remaining = 0
                row[i] = remaining
        return SubtractResult(shortfall=shortfall)

    def has_stock(self) -> bool:
        return self.total_count > 0

    def is_empty(self) -> bool:
        return not self.has_stock()

    def weight_summary(self) -> list[tuple[int, int]]:
        """(weight, count) pairs for classes holding at least one package."""
        summary = [(w, sum(row)) for w, row in zip(WEIGHT_CLASSES, self.counts)]
        return [(w, count) for w, count in summary if count > 0]

    def copy(self) -> "WeightedInventory":  # type: ignore[override]
        return WeightedInventory(counts=[list(row) for row in self.counts])


class FrozenInventory(WeightedInventory):
    """Read-only inventory, as recorded on a movement.

    Counts are stored as tuples and every mutator raises ``TypeError``;
    ``copy()`` returns an ordinary, mutable ``WeightedInventory``.
    """

    model_config = ConfigDict(frozen=True)

    counts: tuple[tuple[int, ...], ...] = Field(  # type: ignore[assignment]
        default_factory=lambda: tuple(tuple(row) for row in _empty_counts())
    )

    @field_validator("counts")
    @classmethod
    def validate_shape(cls, v: Sequence[Sequence[int]]) -> tuple[tuple[int, ...], ...]:  # type: ignore[override]
        return tuple(tuple(row) for row in _check_shape(v))

    @classmethod
    def of(cls, inventory: WeightedInventory) -> "FrozenInventory":
        if isinstance(inventory, FrozenInventory):
            return inventory
        return cls(counts=inventory.counts)

    def set_for_class(self, weight: int, counters: Sequence[int]) -> None:
        raise TypeError("recorded inventory is read-only")

    def add(self, other: WeightedInventory) -> "WeightedInventory":
        raise TypeError("recorded inventory is read-only")

    def subtract(self, other: WeightedInventory) -> SubtractResult:
        raise TypeError("recorded inventory is read-only")
