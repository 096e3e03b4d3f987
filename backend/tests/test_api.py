from __future__ import annotations

import pytest

from asset_tracker.auth import create_access_token
from asset_tracker.permissions import CAPABILITY_KEYS

API = "/api/v1"


def test_login_returns_token_and_user(client, world, password) -> None:
    user = world.users["alpha_logistics"]

    response = client.post(f"{API}/auth/login", json={"username": user.username, "password": password})

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]
    assert body["user"]["role"] == "LOGISTICS_OFFICER"
    assert body["user"]["base_id"] == str(world.alpha.id)


def test_login_failure_is_problem_details(client, world) -> None:
    user = world.users["alpha_logistics"]

    response = client.post(f"{API}/auth/login", json={"username": user.username, "password": "wrong-password"})

    assert response.status_code == 401
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.json()["code"] == "UNAUTHENTICATED"


def test_inactive_user_cannot_log_in(client, db, world, password) -> None:
    user = world.users["bravo_soldier"]
    user.is_active = False
    db.commit()

    response = client.post(f"{API}/auth/login", json={"username": user.username, "password": password})
    assert response.status_code == 401


def test_missing_and_malformed_tokens_are_rejected(client, world) -> None:
    assert client.get(f"{API}/auth/me").status_code == 401
    response = client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_token_of_unknown_subject_is_rejected(client, world) -> None:
    token = create_access_token({"sub": "00000000-0000-0000-0000-000000000000"})
    response = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_me_and_permissions(client, world, auth_headers) -> None:
    headers = auth_headers(world.users["alpha_soldier"])

    me = client.get(f"{API}/auth/me", headers=headers)
    permissions = client.get(f"{API}/auth/permissions", headers=headers)

    assert me.json()["username"] == world.users["alpha_soldier"].username
    body = permissions.json()
    assert body["role"] == "PERSONNEL"
    assert set(body["permissions"]) == set(CAPABILITY_KEYS)
    assert body["permissions"]["canRequestAssets"] is True
    assert body["permissions"]["canViewInventory"] is False


def test_forbidden_action_is_403_problem(client, world, auth_headers) -> None:
    response = client.post(
        f"{API}/bases", json={"name": "Echo"}, headers=auth_headers(world.users["alpha_commander"]),
    )

    assert response.status_code == 403
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.json()["code"] == "FORBIDDEN"


def test_invalid_quantity_is_400_problem(client, world, auth_headers, make_asset) -> None:
    rifle = make_asset(world.alpha, name="Rifle", quantity=5)
    response = client.post(
        f"{API}/transfers",
        json={
            "asset_id": str(rifle.id),
            "from_base_id": str(world.alpha.id),
            "to_base_id": str(world.bravo.id),
            "quantity": 0,
        },
        headers=auth_headers(world.users["alpha_commander"]),
    )
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_QUANTITY"


@pytest.mark.parametrize("quantity", ["abc", 1.5])
def test_non_integer_quantity_is_invalid_quantity_problem(client, world, auth_headers, make_asset, quantity) -> None:
    ammo = make_asset(world.alpha, name="5.56mm", quantity=5)

    response = client.post(
        f"{API}/assignments",
        json={"asset_id": str(ammo.id), "personnel_id": str(world.alpha_soldier_record.id), "quantity": quantity},
        headers=auth_headers(world.users["alpha_logistics"]),
    )

    assert response.status_code == 400
    assert response.headers["content-type"].startswith("application/problem+json")
    body = response.json()
    assert body["code"] == "INVALID_QUANTITY"
    assert body["details"]["errors"][0]["loc"] == ["body", "quantity"]
    assert client.get(f"{API}/assets", headers=auth_headers(world.users["alpha_logistics"])).json()[0]["quantity"] == 5


def test_malformed_body_is_validation_problem(client, world, auth_headers) -> None:
    response = client.post(
        f"{API}/assignments", json={"quantity": 1}, headers=auth_headers(world.users["alpha_logistics"]),
    )

    assert response.status_code == 400
    assert response.headers["content-type"].startswith("application/problem+json")
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    locations = {tuple(error["loc"]) for error in body["details"]["errors"]}
    assert locations == {("body", "asset_id"), ("body", "personnel_id")}


def test_transfer_round_trip_over_http(client, world, auth_headers, make_asset) -> None:
    rifle = make_asset(world.alpha, name="Rifle", quantity=40)
    alpha_commander = auth_headers(world.users["alpha_commander"])
    bravo_commander = auth_headers(world.users["bravo_commander"])

    created = client.post(
        f"{API}/transfers",
        json={
            "asset_id": str(rifle.id),
            "from_base_id": str(world.alpha.id),
            "to_base_id": str(world.bravo.id),
            "quantity": 20,
        },
        headers=alpha_commander,
    )
    assert created.status_code == 201
    transfer_id = created.json()["id"]
    assert created.json()["status"] == "PENDING"

    pending = client.get(f"{API}/transfers", params={"status": "PENDING"}, headers=bravo_commander)
    assert [item["id"] for item in pending.json()] == [transfer_id]

    denied = client.post(f"{API}/transfers/{transfer_id}/approve", headers=alpha_commander)
    assert denied.status_code == 403

    approved = client.post(f"{API}/transfers/{transfer_id}/approve", headers=bravo_commander)
    assert approved.status_code == 200
    assert approved.json()["status"] == "APPROVED"

    again = client.post(f"{API}/transfers/{transfer_id}/reject", headers=bravo_commander)
    assert again.status_code == 409
    assert again.json()["code"] == "INVALID_STATE"

    bravo_assets = client.get(f"{API}/assets", headers=bravo_commander).json()
    assert [(item["name"], item["quantity"]) for item in bravo_assets] == [("Rifle", 20)]


def test_request_approval_over_http(client, world, auth_headers, make_asset) -> None:
    radio = make_asset(world.alpha, name="Radio", quantity=3)
    soldier = auth_headers(world.users["alpha_soldier"])

    created = client.post(
        f"{API}/requests", json={"asset_id": str(radio.id), "quantity": 2, "reason": "Patrol"}, headers=soldier,
    )
    assert created.status_code == 201

    approved = client.post(
        f"{API}/requests/{created.json()['id']}/approve", headers=auth_headers(world.users["alpha_logistics"]),
    )
    assert approved.status_code == 200
    body = approved.json()
    assert body["request"]["status"] == "APPROVED"
    assert body["assignment"]["quantity"] == 2
    assert body["assignment"]["is_open"] is True

    returned = client.post(f"{API}/assignments/{body['assignment']['id']}/return", headers=soldier)
    assert returned.status_code == 200
    assert returned.json()["is_open"] is False

    board = client.get(f"{API}/dashboard", headers=soldier).json()
    assert board["open_assignments"] == 0


def test_insufficient_stock_reports_available_quantity(client, world, auth_headers, make_asset) -> None:
    ammo = make_asset(world.alpha, name="5.56mm", quantity=5)

    response = client.post(
        f"{API}/assignments",
        json={"asset_id": str(ammo.id), "personnel_id": str(world.alpha_soldier_record.id), "quantity": 10},
        headers=auth_headers(world.users["alpha_logistics"]),
    )

    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "INSUFFICIENT_STOCK"
    assert body["details"] == {"asset_id": str(ammo.id), "available": 5, "requested": 10}


def test_audit_logs_endpoint_is_scoped(client, world, auth_headers, make_asset) -> None:
    rifle = make_asset(world.alpha, name="Rifle", quantity=5)
    client.post(
        f"{API}/transfers",
        json={
            "asset_id": str(rifle.id),
            "from_base_id": str(world.alpha.id),
            "to_base_id": str(world.bravo.id),
            "quantity": 1,
        },
        headers=auth_headers(world.users["admin"]),
    )

    bravo_view = client.get(f"{API}/audit-logs", headers=auth_headers(world.users["bravo_commander"]))
    assert [entry["action"] for entry in bravo_view.json()] == ["TRANSFER_APPROVED"]
    assert client.get(f"{API}/audit-logs", headers=auth_headers(world.users["alpha_logistics"])).status_code == 403


def test_health_and_root(client) -> None:
    assert client.get("/").json()["message"] == "Asset Tracker API"
    assert client.get(f"{API}/system/health").json()["status"] in {"ok", "degraded"}
