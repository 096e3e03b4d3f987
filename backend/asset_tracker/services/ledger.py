"""Inventory ledger primitives.

Asset quantity changes only through ``increase`` and ``decrease``. None of
these helpers commit; they run inside the caller's unit of work so the
quantity change, the workflow state change and the audit entry land
together or not at all.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from ..constants import AssetCondition, EquipmentType
from ..domain_errors import InsufficientStockError, InvalidQuantityError, NotFoundError, validation_error
from ..models import Asset, utcnow


def validate_quantity(qty: object) -> int:
    # bool is an int subclass; True must not pass as 1.
    if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
        raise InvalidQuantityError(details={"quantity": qty if isinstance(qty, (int, float, str)) else None})
    return qty


def lock_asset(db: Session, asset_id: UUID) -> Asset:
    """Load an asset row with ``SELECT ... FOR UPDATE`` (ignored by SQLite), refreshing stale state."""
    asset = (
        db.query(Asset)
        .filter(Asset.id == asset_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if asset is None:
        raise NotFoundError("Asset not found")
    return asset


def ensure_stock(asset: Asset, qty: int) -> None:
    if asset.quantity < qty:
        raise InsufficientStockError(
            details={"asset_id": str(asset.id), "available": asset.quantity, "requested": qty},
        )


def increase(db: Session, asset_id: UUID, qty: int) -> Asset:
    qty = validate_quantity(qty)
    asset = lock_asset(db, asset_id)
    db.execute(
        update(Asset)
        .where(Asset.id == asset_id)
        .values(quantity=Asset.quantity + qty, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    db.refresh(asset)
    return asset


def decrease(db: Session, asset_id: UUID, qty: int) -> Asset:
    """Remove ``qty`` units; fails with InsufficientStock without touching the row.

    The decrement is a conditional update (``quantity >= qty``) so a stale
    in-memory quantity can never drive the stored value below zero.
    """
    qty = validate_quantity(qty)
    asset = lock_asset(db, asset_id)
    ensure_stock(asset, qty)
    result = db.execute(
        update(Asset)
        .where(Asset.id == asset_id, Asset.quantity >= qty)
        .values(quantity=Asset.quantity - qty, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.refresh(asset)
        raise InsufficientStockError(
            details={"asset_id": str(asset.id), "available": asset.quantity, "requested": qty},
        )
    db.refresh(asset)
    return asset


def find_or_create_at_base(
    db: Session,
    *,
    name: str,
    equipment_type: str,
    condition: str,
    base_id: UUID,
) -> Asset:
    """Return the asset named ``name`` at ``base_id``, creating it with quantity 0."""
    asset = (
        db.query(Asset)
        .filter(Asset.name == name, Asset.base_id == base_id)
        .with_for_update()
        .first()
    )
    if asset is not None:
        return asset
    asset = Asset(
        name=name,
        equipment_type=EquipmentType(equipment_type).value,
        condition=AssetCondition(condition).value,
        quantity=0,
        base_id=base_id,
    )
    db.add(asset)
    db.flush()
    return asset


def set_condition(db: Session, asset_id: UUID, condition: str) -> Asset:
    try:
        value = AssetCondition(condition).value
    except ValueError as exc:
        raise validation_error(f"Invalid condition: {condition}") from exc
    asset = lock_asset(db, asset_id)
    asset.condition = value
    db.flush()
    return asset
