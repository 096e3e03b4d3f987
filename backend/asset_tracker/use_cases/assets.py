"""Asset catalogue, purchases and condition changes."""
from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from ..constants import AuditAction, EntityType, EquipmentType
from ..database import unit_of_work
from ..domain_errors import ConflictError, InvalidQuantityError
from ..models import (
    Asset, AssetRequest, Assignment, DamageReport, MaintenanceRecord, MilitaryBase, Purchase, Transfer,
)
from ..policies import ADD_ASSETS, DELETE_ASSETS, EDIT_ASSETS, UPDATE_CONDITION, VIEW_INVENTORY
from ..schemas import AssetCreate, AssetUpdate, PurchaseCreate
from ..security import Identity, apply_base_scope, enforce, ensure_visible, in_base_scope, require_entity
from ..services import audit, ledger

logger = logging.getLogger(__name__)

_REFERENCING_MODELS = (
    (Purchase, Purchase.asset_id),
    (Transfer, Transfer.asset_id),
    (Assignment, Assignment.asset_id),
    (AssetRequest, AssetRequest.asset_id),
    (MaintenanceRecord, MaintenanceRecord.asset_id),
    (DamageReport, DamageReport.asset_id),
)


def record_purchase(db: Session, *, asset: Asset, quantity: int, created_by: UUID) -> Purchase:
    """Stock intake: the only way new quantity enters the system."""
    ledger.increase(db, asset.id, quantity)
    purchase = Purchase(asset_id=asset.id, base_id=asset.base_id, quantity=quantity, created_by=created_by)
    db.add(purchase)
    db.flush()
    audit.record(
        db,
        action=AuditAction.PURCHASE,
        entity_type=EntityType.PURCHASE,
        entity_id=purchase.id,
        details={"asset": asset.name, "quantity": quantity},
        user_id=created_by,
        base_id=asset.base_id,
    )
    return purchase


def create_asset_use_case(*, db: Session, current_user: Identity, payload: AssetCreate) -> Asset:
    enforce(ADD_ASSETS, current_user)
    opening = payload.quantity
    if isinstance(opening, bool) or opening < 0:
        raise InvalidQuantityError("Initial quantity cannot be negative", details={"quantity": opening})

    with unit_of_work(db):
        require_entity(db, MilitaryBase, entity_id=payload.base_id, not_found="Base not found")
        asset = Asset(
            name=payload.name,
            equipment_type=payload.equipment_type.value,
            condition=payload.condition.value,
            base_id=payload.base_id,
            quantity=0,
        )
        db.add(asset)
        db.flush()
        audit.record(
            db,
            action=AuditAction.CREATE_ASSET,
            entity_type=EntityType.ASSET,
            entity_id=asset.id,
            details={"name": asset.name, "equipment_type": asset.equipment_type},
            user_id=current_user.id,
            base_id=asset.base_id,
        )
        if opening > 0:
            record_purchase(db, asset=asset, quantity=opening, created_by=current_user.id)

    logger.info("Asset %s created at base %s by user %s", asset.id, asset.base_id, current_user.id)
    return asset


def update_asset_use_case(*, db: Session, current_user: Identity, asset_id: UUID, payload: AssetUpdate) -> Asset:
    enforce(EDIT_ASSETS, current_user)
    changes = payload.model_dump(mode="json", exclude_unset=True, exclude_none=True)

    with unit_of_work(db):
        asset = require_entity(db, Asset, entity_id=asset_id, not_found="Asset not found", for_update=True)
        if "name" in changes:
            asset.name = changes["name"]
        if "equipment_type" in changes:
            asset.equipment_type = EquipmentType(changes["equipment_type"]).value
        db.flush()
        audit.record(
            db,
            action=AuditAction.UPDATE_ASSET,
            entity_type=EntityType.ASSET,
            entity_id=asset.id,
            details=changes,
            user_id=current_user.id,
            base_id=asset.base_id,
        )
    return asset


def delete_asset_use_case(*, db: Session, current_user: Identity, asset_id: UUID) -> None:
    enforce(DELETE_ASSETS, current_user)

    with unit_of_work(db):
        asset = require_entity(db, Asset, entity_id=asset_id, not_found="Asset not found", for_update=True)
        if asset.quantity != 0:
            raise ConflictError("Asset still holds stock", details={"quantity": asset.quantity})
        for model, column in _REFERENCING_MODELS:
            if db.query(model.id).filter(column == asset.id).first() is not None:
                raise ConflictError(
                    "Asset has history and cannot be deleted",
                    details={"referenced_by": model.__tablename__},
                )
        audit.record(
            db,
            action=AuditAction.DELETE_ASSET,
            entity_type=EntityType.ASSET,
            entity_id=asset.id,
            details={"name": asset.name},
            user_id=current_user.id,
            base_id=asset.base_id,
        )
        db.delete(asset)

    logger.info("Asset %s deleted by user %s", asset_id, current_user.id)


def update_condition_use_case(*, db: Session, current_user: Identity, asset_id: UUID, condition: str) -> Asset:
    with unit_of_work(db):
        asset = require_entity(db, Asset, entity_id=asset_id, not_found="Asset not found")
        enforce(UPDATE_CONDITION, current_user, asset)
        previous = asset.condition
        asset = ledger.set_condition(db, asset.id, condition)
        audit.record(
            db,
            action=AuditAction.UPDATE_CONDITION,
            entity_type=EntityType.ASSET,
            entity_id=asset.id,
            details={"from": previous, "to": asset.condition},
            user_id=current_user.id,
            base_id=asset.base_id,
        )
    return asset


def list_assets_use_case(
    *,
    db: Session,
    current_user: Identity,
    equipment_type: EquipmentType | None = None,
    base_id: UUID | None = None,
) -> list[Asset]:
    enforce(VIEW_INVENTORY, current_user)
    query = apply_base_scope(db.query(Asset), current_user, Asset.base_id)
    if equipment_type is not None:
        query = query.filter(Asset.equipment_type == EquipmentType(equipment_type).value)
    if base_id is not None:
        query = query.filter(Asset.base_id == base_id)
    return query.order_by(Asset.name.asc()).all()


def get_asset_use_case(*, db: Session, current_user: Identity, asset_id: UUID) -> Asset:
    enforce(VIEW_INVENTORY, current_user)
    asset = require_entity(db, Asset, entity_id=asset_id, not_found="Asset not found")
    ensure_visible(in_base_scope(current_user, asset.base_id), "Asset not found")
    return asset


def create_purchase_use_case(*, db: Session, current_user: Identity, payload: PurchaseCreate) -> Purchase:
    enforce(ADD_ASSETS, current_user)
    quantity = ledger.validate_quantity(payload.quantity)

    with unit_of_work(db):
        asset = ledger.lock_asset(db, payload.asset_id)
        purchase = record_purchase(db, asset=asset, quantity=quantity, created_by=current_user.id)

    logger.info("Purchase %s qty=%s for asset %s by user %s", purchase.id, quantity, asset.id, current_user.id)
    return purchase


def list_purchases_use_case(
    *,
    db: Session,
    current_user: Identity,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Purchase]:
    enforce(VIEW_INVENTORY, current_user)
    query = apply_base_scope(db.query(Purchase), current_user, Purchase.base_id)
    if start is not None:
        query = query.filter(Purchase.created_at >= start)
    if end is not None:
        query = query.filter(Purchase.created_at <= end)
    return query.order_by(Purchase.created_at.desc()).all()
