"""Stock is neither created nor destroyed outside purchases."""
from __future__ import annotations

import pytest
from sqlalchemy import func

from asset_tracker.constants import EquipmentType
from asset_tracker.domain_errors import DomainError
from asset_tracker.models import Asset, Assignment, Purchase
from asset_tracker.schemas import AssetCreate, AssetRequestCreate, AssignmentCreate, PurchaseCreate, TransferCreate
from asset_tracker.use_cases import asset_requests, assets, assignments, transfers


def _totals(db) -> tuple[int, int]:
    purchased = db.query(func.coalesce(func.sum(Purchase.quantity), 0)).scalar()
    on_hand = db.query(func.coalesce(func.sum(Asset.quantity), 0)).scalar()
    issued = (
        db.query(func.coalesce(func.sum(Assignment.quantity), 0))
        .filter(Assignment.returned_at.is_(None))
        .scalar()
    )
    return int(purchased), int(on_hand) + int(issued)


def _assert_conserved(db) -> None:
    purchased, accounted = _totals(db)
    assert purchased == accounted
    assert db.query(Asset).filter(Asset.quantity < 0).count() == 0


def test_mixed_workflow_conserves_stock(db, world) -> None:
    rifle = assets.create_asset_use_case(
        db=db,
        current_user=world.admin,
        payload=AssetCreate(name="Rifle", equipment_type=EquipmentType.WEAPON, base_id=world.alpha.id, quantity=50),
    )
    _assert_conserved(db)

    assets.create_purchase_use_case(
        db=db, current_user=world.admin, payload=PurchaseCreate(asset_id=rifle.id, quantity=10),
    )
    _assert_conserved(db)

    transfer = transfers.create_transfer_use_case(
        db=db,
        current_user=world.alpha_commander,
        payload=TransferCreate(asset_id=rifle.id, from_base_id=world.alpha.id, to_base_id=world.bravo.id, quantity=25),
    )
    transfers.approve_transfer_use_case(db=db, current_user=world.bravo_commander, transfer_id=transfer.id)
    _assert_conserved(db)

    bravo_rifle = db.query(Asset).filter(Asset.name == "Rifle", Asset.base_id == world.bravo.id).one()
    issued = assignments.issue_asset_use_case(
        db=db,
        current_user=world.bravo_logistics,
        payload=AssignmentCreate(asset_id=bravo_rifle.id, personnel_id=world.bravo_soldier_record.id, quantity=5),
    )
    _assert_conserved(db)

    request = asset_requests.create_request_use_case(
        db=db,
        current_user=world.alpha_soldier,
        payload=AssetRequestCreate(asset_id=rifle.id, quantity=3),
    )
    asset_requests.approve_request_use_case(db=db, current_user=world.alpha_logistics, request_id=request.id)
    _assert_conserved(db)

    assignments.return_assignment_use_case(db=db, current_user=world.bravo_soldier, assignment_id=issued.id)
    _assert_conserved(db)

    # Failed operations leave the totals untouched.
    with pytest.raises(DomainError):
        transfers.create_transfer_use_case(
            db=db,
            current_user=world.admin,
            payload=TransferCreate(
                asset_id=rifle.id, from_base_id=world.alpha.id, to_base_id=world.bravo.id, quantity=1000,
            ),
        )
    with pytest.raises(DomainError):
        assignments.issue_asset_use_case(
            db=db,
            current_user=world.alpha_logistics,
            payload=AssignmentCreate(asset_id=rifle.id, personnel_id=world.alpha_soldier_record.id, quantity=0),
        )
    _assert_conserved(db)

    assert _totals(db) == (60, 60)
    assert db.get(Asset, rifle.id).quantity == 32
    assert db.get(Asset, bravo_rifle.id).quantity == 25
