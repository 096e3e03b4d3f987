from __future__ import annotations

import pytest

from asset_tracker.constants import Role
from asset_tracker.permissions import CAPABILITY_KEYS, ROLE_PERMISSIONS, check_permission, get_role_permissions

# (capability, ADMIN, BASE_COMMANDER, LOGISTICS_OFFICER, PERSONNEL)
EXPECTED_MATRIX = [
    ("canManageUsers", True, False, False, False),
    ("canViewAllBases", True, False, False, False),
    ("canAddAssets", True, False, False, False),
    ("canEditAssets", True, False, False, False),
    ("canDeleteAssets", True, False, False, False),
    ("canViewInventory", True, True, True, False),
    ("canApproveTransfers", True, True, False, False),
    ("canRequestTransfers", True, True, False, False),
    ("canIssueAssets", True, False, True, False),
    ("canReceiveReturns", True, False, True, False),
    ("canUpdateCondition", True, False, True, False),
    ("canCreateMaintenance", True, False, True, False),
    ("canViewReports", True, True, False, False),
    ("canViewAuditLogs", True, True, False, False),
    ("canRequestAssets", False, False, False, True),
    ("canViewAssignedAssets", True, True, True, True),
]
ROLE_ORDER = (Role.ADMIN, Role.BASE_COMMANDER, Role.LOGISTICS_OFFICER, Role.PERSONNEL)


@pytest.mark.parametrize(("capability", "expected"), [(row[0], row[1:]) for row in EXPECTED_MATRIX])
def test_matrix_matches_reference_table(capability, expected) -> None:
    for role, allowed in zip(ROLE_ORDER, expected):
        assert check_permission(role, capability) is allowed, (role, capability)


def test_every_role_declares_every_capability() -> None:
    assert set(ROLE_PERMISSIONS) == set(Role)
    for role, permissions in ROLE_PERMISSIONS.items():
        assert set(permissions) == set(CAPABILITY_KEYS), role
    assert {row[0] for row in EXPECTED_MATRIX} == set(CAPABILITY_KEYS)


def test_role_accepts_plain_string() -> None:
    assert check_permission("LOGISTICS_OFFICER", "canIssueAssets") is True


@pytest.mark.parametrize("role", ["QUARTERMASTER", "", None, "admin"])
def test_unknown_role_is_denied(role) -> None:
    assert check_permission(role, "canViewInventory") is False
    assert get_role_permissions(role) == {key: False for key in CAPABILITY_KEYS}


def test_unknown_capability_is_denied_even_for_admin() -> None:
    assert check_permission(Role.ADMIN, "canLaunchMissiles") is False


def test_get_role_permissions_returns_full_key_set() -> None:
    permissions = get_role_permissions(Role.PERSONNEL)
    assert tuple(permissions) == CAPABILITY_KEYS
    assert [key for key, allowed in permissions.items() if allowed] == ["canRequestAssets", "canViewAssignedAssets"]
