"""
Entity <-> document record codec.

Records use the camelCase field names of the stored documents. Decoding is
strict: anything that does not fit the expected shape raises
``DecodeFailureError`` so callers can decide whether to skip the record.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

from eggledger.core.entities.app_settings import AppSettings
from eggledger.core.entities.daily_stock import DailyStock
from eggledger.core.entities.inventory import WEIGHT_CLASSES, EggVariant, WeightedInventory
from eggledger.core.entities.movement import Movement, MovementKind
from eggledger.core.exceptions import DecodeFailureError, InvalidInputError
from eggledger.core.interfaces.document_store import (
    APP_SETTINGS,
    CARGO_ENTRIES,
    DAILY_STOCKS,
    Record,
)

T = TypeVar("T")

# Movement type values written by earlier app versions
_LEGACY_KINDS = {
    "carga": MovementKind.INCOMING,
    "salida": MovementKind.OUTGOING,
    "ajuste": MovementKind.ADJUSTMENT,
    "cierre": MovementKind.DAY_CLOSE,
}


def _encode_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _decode_datetime(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def encode_inventory(inventory: WeightedInventory) -> dict[str, list[int]]:
    return {f"kg{w}": list(row) for w, row in zip(WEIGHT_CLASSES, inventory.counts)}


def decode_inventory(data: Any) -> WeightedInventory:
    """Accept the ``{"kg7": [...]}`` mapping or a plain 7x10 matrix."""
    if isinstance(data, list):
        return WeightedInventory(counts=data)
    if not isinstance(data, dict):
        raise TypeError(f"inventory must be a mapping, got {type(data).__name__}")
    return WeightedInventory(counts=[data.get(f"kg{w}", [0] * 10) for w in WEIGHT_CLASSES])


def _decode(collection: str, record: Record, build: Callable[[Record], T]) -> T:
    try:
        return build(record)
    except (KeyError, TypeError, ValueError, InvalidInputError) as e:
        reason = f"missing field {e}" if isinstance(e, KeyError) else str(e)
        raise DecodeFailureError(collection, record.get("id"), reason) from e


# Daily stock


def encode_daily_stock(stock: DailyStock) -> Record:
    return {
        "date": stock.date,
        "rosadoPackages": encode_inventory(stock.rosado_packages),
        "pardoPackages": encode_inventory(stock.pardo_packages),
        "totalPackages": stock.total_packages,
        "totalWeight": stock.total_weight,
        "isClosed": stock.is_closed,
        "isCurrentDay": stock.is_current_day,
        "closedAt": _encode_datetime(stock.closed_at),
        "createdAt": _encode_datetime(stock.created_at),
        "updatedAt": _encode_datetime(stock.updated_at),
    }


def _build_daily_stock(record: Record) -> DailyStock:
    # Stored totals are ignored: they are always derived from the inventories.
    return DailyStock(
        date=record["date"],
        rosado_packages=decode_inventory(record["rosadoPackages"]),
        pardo_packages=decode_inventory(record["pardoPackages"]),
        is_closed=bool(record.get("isClosed", False)),
        is_current_day=bool(record.get("isCurrentDay", False)),
        closed_at=_decode_datetime(record.get("closedAt")),
        created_at=_decode_datetime(record["createdAt"]),
        updated_at=_decode_datetime(record["updatedAt"]),
    )


def decode_daily_stock(record: Record) -> DailyStock:
    return _decode(DAILY_STOCKS, record, _build_daily_stock)


# Movements


def encode_movement(movement: Movement) -> Record:
    return {
        "date": movement.date,
        "rosadoPackages": encode_inventory(movement.rosado_packages),
        "pardoPackages": encode_inventory(movement.pardo_packages),
        "type": movement.kind.value,
        "supplier": movement.supplier,
        "notes": movement.notes,
        "timestamp": _encode_datetime(movement.timestamp),
    }


def _decode_kind(value: Any) -> MovementKind:
    if value in _LEGACY_KINDS:
        return _LEGACY_KINDS[value]
    return MovementKind(value)


def _build_movement(record: Record) -> Movement:
    return Movement(
        id=record.get("id"),
        date=record["date"],
        kind=_decode_kind(record["type"]),
        supplier=record["supplier"],
        rosado_packages=decode_inventory(record.get("rosadoPackages", {})),
        pardo_packages=decode_inventory(record.get("pardoPackages", {})),
        notes=record.get("notes"),
        timestamp=_decode_datetime(record["timestamp"]),
    )


def decode_movement(record: Record) -> Movement:
    return _decode(CARGO_ENTRIES, record, _build_movement)


# App settings


def encode_settings(settings: AppSettings) -> Record:
    return {
        "currentDate": settings.current_date,
        "isFirstLaunch": settings.is_first_launch,
        "lastBackupDate": _encode_datetime(settings.last_backup_date),
        "autoBackupEnabled": settings.auto_backup_enabled,
        "companyName": settings.company_name,
        "companyLogo": settings.company_logo,
        "frequentSuppliers": list(settings.frequent_suppliers),
        "defaultEggType": settings.default_variant.value,
        "showBothEggTypes": settings.show_both_variants,
    }


def _build_settings(record: Record) -> AppSettings:
    defaults = AppSettings()
    return AppSettings(
        current_date=record.get("currentDate", defaults.current_date),
        is_first_launch=record.get("isFirstLaunch", defaults.is_first_launch),
        last_backup_date=_decode_datetime(record.get("lastBackupDate")),
        auto_backup_enabled=record.get("autoBackupEnabled", defaults.auto_backup_enabled),
        company_name=record.get("companyName", defaults.company_name),
        company_logo=record.get("companyLogo"),
        frequent_suppliers=list(record.get("frequentSuppliers", [])),
        default_variant=EggVariant(record.get("defaultEggType", defaults.default_variant.value)),
        show_both_variants=record.get("showBothEggTypes", defaults.show_both_variants),
    )


def decode_settings(record: Record) -> AppSettings:
    return _decode(APP_SETTINGS, record, _build_settings)
