"""Shared fixtures: in-memory SQLite store, record factories and an API client."""
from __future__ import annotations

from types import SimpleNamespace
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from asset_tracker.auth import create_access_token, get_password_hash, token_claims_for
from asset_tracker.constants import AssetCondition, EquipmentType, Role
from asset_tracker.database import Base, get_db
from asset_tracker.models import Asset, MilitaryBase, Personnel, Purchase, User
from asset_tracker.security import Identity

TEST_PASSWORD = "s3cret-pass"


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(engine) -> Iterator[Session]:
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def password() -> str:
    return TEST_PASSWORD


@pytest.fixture(scope="session")
def password_hash(password) -> str:
    return get_password_hash(password)


@pytest.fixture()
def make_base(db):
    def _make(name: str = "Alpha", location: str | None = None) -> MilitaryBase:
        base = MilitaryBase(name=name, location=location)
        db.add(base)
        db.commit()
        return base

    return _make


@pytest.fixture()
def make_user(db, password_hash):
    counter = {"n": 0}

    def _make(role: Role, base: MilitaryBase | None = None, username: str | None = None) -> User:
        counter["n"] += 1
        user = User(
            username=username or f"{role.value.lower()}_{counter['n']}",
            password_hash=password_hash,
            full_name=f"{role.value.title()} {counter['n']}",
            role=role.value,
            base_id=base.id if base is not None else None,
            is_active=True,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture()
def make_personnel(db):
    def _make(base: MilitaryBase | None, user: User | None = None, name: str = "Pvt. Doe") -> Personnel:
        personnel = Personnel(
            name=name,
            rank="Private",
            base_id=base.id if base is not None else None,
            user_id=user.id if user is not None else None,
        )
        db.add(personnel)
        db.commit()
        return personnel

    return _make


@pytest.fixture()
def make_asset(db):
    """Asset with opening stock booked as a purchase, as the service itself does."""

    def _make(
        base: MilitaryBase,
        name: str = "Rifle",
        quantity: int = 0,
        equipment_type: EquipmentType = EquipmentType.WEAPON,
        condition: AssetCondition = AssetCondition.GOOD,
    ) -> Asset:
        asset = Asset(
            name=name,
            equipment_type=equipment_type.value,
            condition=condition.value,
            quantity=quantity,
            base_id=base.id,
        )
        db.add(asset)
        db.flush()
        if quantity:
            db.add(Purchase(asset_id=asset.id, base_id=base.id, quantity=quantity))
        db.commit()
        return asset

    return _make


def _identity(user: User) -> Identity:
    return Identity.from_user(user)


@pytest.fixture()
def world(make_base, make_user, make_personnel):
    """Two bases with one user of each role per base, plus personnel records."""
    alpha = make_base("Alpha")
    bravo = make_base("Bravo")
    admin = make_user(Role.ADMIN)
    alpha_commander = make_user(Role.BASE_COMMANDER, alpha)
    bravo_commander = make_user(Role.BASE_COMMANDER, bravo)
    alpha_logistics = make_user(Role.LOGISTICS_OFFICER, alpha)
    bravo_logistics = make_user(Role.LOGISTICS_OFFICER, bravo)
    alpha_soldier = make_user(Role.PERSONNEL, alpha)
    bravo_soldier = make_user(Role.PERSONNEL, bravo)
    alpha_soldier_record = make_personnel(alpha, alpha_soldier, name="Sgt. Alpha")
    bravo_soldier_record = make_personnel(bravo, bravo_soldier, name="Cpl. Bravo")

    w = SimpleNamespace()
    w.alpha, w.bravo = alpha, bravo
    w.admin = _identity(admin)
    w.alpha_commander = _identity(alpha_commander)
    w.bravo_commander = _identity(bravo_commander)
    w.alpha_logistics = _identity(alpha_logistics)
    w.bravo_logistics = _identity(bravo_logistics)
    w.alpha_soldier = _identity(alpha_soldier)
    w.bravo_soldier = _identity(bravo_soldier)
    w.alpha_soldier_record = alpha_soldier_record
    w.bravo_soldier_record = bravo_soldier_record
    w.users = {
        "admin": admin,
        "alpha_commander": alpha_commander,
        "bravo_commander": bravo_commander,
        "alpha_logistics": alpha_logistics,
        "bravo_logistics": bravo_logistics,
        "alpha_soldier": alpha_soldier,
        "bravo_soldier": bravo_soldier,
    }
    return w


@pytest.fixture()
def client(db) -> Iterator[TestClient]:
    from asset_tracker.main import app

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(token_claims_for(user))}"}

    return _headers
