from __future__ import annotations

from uuid import uuid4

import pytest

from asset_tracker.constants import ReviewStatus, Role
from asset_tracker.domain_errors import (
    DomainError, ForbiddenError, InsufficientStockError, InvalidQuantityError, InvalidStateError, NotFoundError,
)
from asset_tracker.models import Asset, AuditLog, Transfer
from asset_tracker.schemas import TransferCreate
from asset_tracker.security import Identity
from asset_tracker.use_cases import transfers as use_case


def _payload(asset, from_base, to_base, quantity):
    return TransferCreate(asset_id=asset.id, from_base_id=from_base.id, to_base_id=to_base.id, quantity=quantity)


def _actions(db) -> list[str]:
    return sorted(entry.action for entry in db.query(AuditLog).all())


def _asset_at(db, name, base):
    return db.query(Asset).filter(Asset.name == name, Asset.base_id == base.id).one_or_none()


def test_commander_request_then_destination_commander_approves(db, world, make_asset) -> None:
    rifle = make_asset(world.alpha, name="Rifle", quantity=40)

    transfer = use_case.create_transfer_use_case(
        db=db, current_user=world.alpha_commander, payload=_payload(rifle, world.alpha, world.bravo, 20),
    )
    assert transfer.status == ReviewStatus.PENDING.value
    assert db.get(Asset, rifle.id).quantity == 40

    approved = use_case.approve_transfer_use_case(db=db, current_user=world.bravo_commander, transfer_id=transfer.id)

    assert approved.status == ReviewStatus.APPROVED.value
    assert approved.approved_by == world.bravo_commander.id
    assert approved.approved_at is not None
    assert db.get(Asset, rifle.id).quantity == 20
    landed = _asset_at(db, "Rifle", world.bravo)
    assert landed is not None and landed.id != rifle.id
    assert landed.quantity == 20
    assert landed.equipment_type == rifle.equipment_type
    assert _actions(db) == ["TRANSFER_APPROVED", "TRANSFER_REQUEST"]


def test_approval_lands_on_existing_destination_row(db, world, make_asset) -> None:
    rifle = make_asset(world.alpha, name="Rifle", quantity=10)
    bravo_rifle = make_asset(world.bravo, name="Rifle", quantity=5)
    transfer = use_case.create_transfer_use_case(
        db=db, current_user=world.alpha_commander, payload=_payload(rifle, world.alpha, world.bravo, 4),
    )

    use_case.approve_transfer_use_case(db=db, current_user=world.bravo_commander, transfer_id=transfer.id)

    assert db.get(Asset, bravo_rifle.id).quantity == 9
    assert db.query(Asset).filter(Asset.base_id == world.bravo.id).count() == 1


def test_admin_transfer_is_approved_and_executed_immediately(db, world, make_asset) -> None:
    rifle = make_asset(world.alpha, name="Rifle", quantity=10)

    transfer = use_case.create_transfer_use_case(
        db=db, current_user=world.admin, payload=_payload(rifle, world.alpha, world.bravo, 6),
    )

    assert transfer.status == ReviewStatus.APPROVED.value
    assert transfer.approved_by == world.admin.id
    assert db.get(Asset, rifle.id).quantity == 4
    assert _asset_at(db, "Rifle", world.bravo).quantity == 6
    assert _actions(db) == ["TRANSFER_APPROVED", "TRANSFER_REQUEST"]


def test_commander_cannot_request_from_another_base(db, world, make_asset) -> None:
    rifle = make_asset(world.bravo, name="Rifle", quantity=10)

    with pytest.raises(ForbiddenError):
        use_case.create_transfer_use_case(
            db=db, current_user=world.alpha_commander, payload=_payload(rifle, world.bravo, world.alpha, 1),
        )
    assert db.query(Transfer).count() == 0


@pytest.mark.parametrize("actor", ["alpha_logistics", "alpha_soldier"])
def test_roles_without_capability_cannot_request(db, world, make_asset, actor) -> None:
    rifle = make_asset(world.alpha, name="Rifle", quantity=10)
    with pytest.raises(ForbiddenError):
        use_case.create_transfer_use_case(
            db=db, current_user=getattr(world, actor), payload=_payload(rifle, world.alpha, world.bravo, 1),
        )


def test_request_larger_than_stock_fails(db, world, make_asset) -> None:
    rifle = make_asset(world.alpha, name="Rifle", quantity=3)
    with pytest.raises(InsufficientStockError):
        use_case.create_transfer_use_case(
            db=db, current_user=world.alpha_commander, payload=_payload(rifle, world.alpha, world.bravo, 4),
        )
    assert db.query(Transfer).count() == 0
    assert db.query(AuditLog).count() == 0


@pytest.mark.parametrize("quantity", [0, -5])
def test_request_with_non_positive_quantity_fails(db, world, make_asset, quantity) -> None:
    rifle = make_asset(world.alpha, name="Rifle", quantity=3)
    with pytest.raises(InvalidQuantityError):
        use_case.create_transfer_use_case(
            db=db, current_user=world.alpha_commander, payload=_payload(rifle, world.alpha, world.bravo, quantity),
        )


def test_capability_is_checked_before_quantity(db, world, make_asset) -> None:
    rifle = make_asset(world.alpha, name="Rifle", quantity=3)
    with pytest.raises(ForbiddenError):
        use_case.create_transfer_use_case(
            db=db, current_user=world.alpha_soldier, payload=_payload(rifle, world.alpha, world.bravo, 0),
        )


def test_same_source_and_destination_is_rejected(db, world, make_asset) -> None:
    rifle = make_asset(world.alpha, name="Rifle", quantity=3)
    with pytest.raises(DomainError) as exc_info:
        use_case.create_transfer_use_case(
            db=db, current_user=world.alpha_commander, payload=_payload(rifle, world.alpha, world.alpha, 1),
        )
    assert exc_info.value.code == "VALIDATION_ERROR"


def test_asset_must_sit_at_source_base(db, world, make_asset) -> None:
    bravo_rifle = make_asset(world.bravo, name="Rifle", quantity=3)
    with pytest.raises(DomainError) as exc_info:
        use_case.create_transfer_use_case(
            db=db, current_user=world.admin, payload=_payload(bravo_rifle, world.alpha, world.bravo, 1),
        )
    assert exc_info.value.code == "VALIDATION_ERROR"


def test_unknown_asset_is_not_found(db, world) -> None:
    payload = TransferCreate(asset_id=uuid4(), from_base_id=world.alpha.id, to_base_id=world.bravo.id, quantity=1)
    with pytest.raises(NotFoundError):
        use_case.create_transfer_use_case(db=db, current_user=world.alpha_commander, payload=payload)


def test_source_commander_cannot_approve_own_outgoing_transfer(db, world, make_asset) -> None:
    rifle = make_asset(world.alpha, name="Rifle", quantity=10)
    transfer = use_case.create_transfer_use_case(
        db=db, current_user=world.alpha_commander, payload=_payload(rifle, world.alpha, world.bravo, 2),
    )

    with pytest.raises(ForbiddenError):
        use_case.approve_transfer_use_case(db=db, current_user=world.alpha_commander, transfer_id=transfer.id)
    assert db.get(Transfer, transfer.id).status == ReviewStatus.PENDING.value
    assert db.get(Asset, rifle.id).quantity == 10


def test_approval_rechecks_stock_and_rolls_back(db, world, make_asset) -> None:
    rifle = make_asset(world.alpha, name="Rifle", quantity=10)
    first = use_case.create_transfer_use_case(
        db=db, current_user=world.alpha_commander, payload=_payload(rifle, world.alpha, world.bravo, 8),
    )
    second = use_case.create_transfer_use_case(
        db=db, current_user=world.alpha_commander, payload=_payload(rifle, world.alpha, world.bravo, 8),
    )
    use_case.approve_transfer_use_case(db=db, current_user=world.bravo_commander, transfer_id=first.id)

    with pytest.raises(InsufficientStockError):
        use_case.approve_transfer_use_case(db=db, current_user=world.bravo_commander, transfer_id=second.id)

    assert db.get(Transfer, second.id).status == ReviewStatus.PENDING.value
    assert db.get(Asset, rifle.id).quantity == 2
    assert _asset_at(db, "Rifle", world.bravo).quantity == 8
    assert _actions(db).count("TRANSFER_APPROVED") == 1


def test_reject_moves_no_stock(db, world, make_asset) -> None:
    rifle = make_asset(world.alpha, name="Rifle", quantity=10)
    transfer = use_case.create_transfer_use_case(
        db=db, current_user=world.alpha_commander, payload=_payload(rifle, world.alpha, world.bravo, 5),
    )

    rejected = use_case.reject_transfer_use_case(db=db, current_user=world.bravo_commander, transfer_id=transfer.id)

    assert rejected.status == ReviewStatus.REJECTED.value
    assert rejected.rejected_by == world.bravo_commander.id
    assert db.get(Asset, rifle.id).quantity == 10
    assert _asset_at(db, "Rifle", world.bravo) is None
    assert _actions(db) == ["TRANSFER_REJECTED", "TRANSFER_REQUEST"]


@pytest.mark.parametrize("first_step", ["approve", "reject"])
@pytest.mark.parametrize("second_step", ["approve", "reject"])
def test_terminal_transfers_cannot_be_reviewed_again(db, world, make_asset, first_step, second_step) -> None:
    rifle = make_asset(world.alpha, name="Rifle", quantity=10)
    transfer = use_case.create_transfer_use_case(
        db=db, current_user=world.alpha_commander, payload=_payload(rifle, world.alpha, world.bravo, 5),
    )
    steps = {"approve": use_case.approve_transfer_use_case, "reject": use_case.reject_transfer_use_case}
    steps[first_step](db=db, current_user=world.bravo_commander, transfer_id=transfer.id)
    quantity_after_first = db.get(Asset, rifle.id).quantity
    audit_count = db.query(AuditLog).count()

    with pytest.raises(InvalidStateError):
        steps[second_step](db=db, current_user=world.bravo_commander, transfer_id=transfer.id)

    assert db.get(Asset, rifle.id).quantity == quantity_after_first
    assert db.query(AuditLog).count() == audit_count


def test_listing_is_scoped_to_bases_involved(db, world, make_base, make_user, make_asset) -> None:
    charlie = make_base("Charlie")
    charlie_commander = Identity.from_user(make_user(Role.BASE_COMMANDER, charlie))
    rifle = make_asset(world.alpha, name="Rifle", quantity=10)
    transfer = use_case.create_transfer_use_case(
        db=db, current_user=world.alpha_commander, payload=_payload(rifle, world.alpha, world.bravo, 1),
    )

    assert [t.id for t in use_case.list_transfers_use_case(db=db, current_user=world.alpha_commander)] == [transfer.id]
    assert [t.id for t in use_case.list_transfers_use_case(db=db, current_user=world.bravo_commander)] == [transfer.id]
    assert use_case.list_transfers_use_case(db=db, current_user=charlie_commander) == []
    assert len(use_case.list_transfers_use_case(db=db, current_user=world.admin)) == 1
    assert use_case.list_transfers_use_case(
        db=db, current_user=world.admin, status=ReviewStatus.APPROVED,
    ) == []

    with pytest.raises(NotFoundError):
        use_case.get_transfer_use_case(db=db, current_user=charlie_commander, transfer_id=transfer.id)
    assert use_case.get_transfer_use_case(db=db, current_user=world.bravo_commander, transfer_id=transfer.id).id == (
        transfer.id
    )
