"""Role permissions matrix.

Static data: role -> capability -> bool. Every authorization decision in the
service reads from this table, so it is kept as plain data.
"""
from __future__ import annotations

from .constants import Role


CAPABILITY_KEYS: tuple[str, ...] = (
    "canManageUsers",
    "canViewAllBases",
    "canAddAssets",
    "canEditAssets",
    "canDeleteAssets",
    "canViewInventory",
    "canApproveTransfers",
    "canRequestTransfers",
    "canIssueAssets",
    "canReceiveReturns",
    "canUpdateCondition",
    "canCreateMaintenance",
    "canViewReports",
    "canViewAuditLogs",
    "canRequestAssets",
    "canViewAssignedAssets",
)


# Role permissions matrix
ROLE_PERMISSIONS: dict[Role, dict[str, bool]] = {
    Role.ADMIN: {
        "canManageUsers": True,
        "canViewAllBases": True,
        "canAddAssets": True,
        "canEditAssets": True,
        "canDeleteAssets": True,
        "canViewInventory": True,
        "canApproveTransfers": True,
        "canRequestTransfers": True,
        "canIssueAssets": True,
        "canReceiveReturns": True,
        "canUpdateCondition": True,
        "canCreateMaintenance": True,
        "canViewReports": True,
        "canViewAuditLogs": True,
        "canRequestAssets": False,
        "canViewAssignedAssets": True,
    },
    Role.BASE_COMMANDER: {
        "canManageUsers": False,
        "canViewAllBases": False,
        "canAddAssets": False,
        "canEditAssets": False,
        "canDeleteAssets": False,
        "canViewInventory": True,
        "canApproveTransfers": True,  # only transfers TO their base
        "canRequestTransfers": True,  # only FROM their base
        "canIssueAssets": False,
        "canReceiveReturns": False,
        "canUpdateCondition": False,
        "canCreateMaintenance": False,
        "canViewReports": True,
        "canViewAuditLogs": True,
        "canRequestAssets": False,
        "canViewAssignedAssets": True,
    },
    Role.LOGISTICS_OFFICER: {
        "canManageUsers": False,
        "canViewAllBases": False,
        "canAddAssets": False,
        "canEditAssets": False,
        "canDeleteAssets": False,
        "canViewInventory": True,
        "canApproveTransfers": False,
        "canRequestTransfers": False,
        "canIssueAssets": True,
        "canReceiveReturns": True,
        "canUpdateCondition": True,
        "canCreateMaintenance": True,
        "canViewReports": False,
        "canViewAuditLogs": False,
        "canRequestAssets": False,
        "canViewAssignedAssets": True,
    },
    Role.PERSONNEL: {
        "canManageUsers": False,
        "canViewAllBases": False,
        "canAddAssets": False,
        "canEditAssets": False,
        "canDeleteAssets": False,
        "canViewInventory": False,
        "canApproveTransfers": False,
        "canRequestTransfers": False,
        "canIssueAssets": False,
        "canReceiveReturns": False,
        "canUpdateCondition": False,
        "canCreateMaintenance": False,
        "canViewReports": False,
        "canViewAuditLogs": False,
        "canRequestAssets": True,
        "canViewAssignedAssets": True,  # only their own
    },
}


def _coerce_role(role: Role | str | None) -> Role | None:
    if isinstance(role, Role):
        return role
    try:
        return Role(role)
    except ValueError:
        return None


def check_permission(role: Role | str | None, capability: str) -> bool:
    """Check if a role holds a capability. Unknown roles and capabilities are denied."""
    resolved = _coerce_role(role)
    if resolved is None:
        return False
    return ROLE_PERMISSIONS.get(resolved, {}).get(capability, False)


def get_role_permissions(role: Role | str | None) -> dict[str, bool]:
    """Full capability map for a role (all False for an unknown role)."""
    resolved = _coerce_role(role)
    permissions = ROLE_PERMISSIONS.get(resolved, {}) if resolved is not None else {}
    return {key: bool(permissions.get(key, False)) for key in CAPABILITY_KEYS}
