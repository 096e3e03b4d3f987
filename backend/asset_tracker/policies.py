"""Per-workflow authorization policies.

Each policy names the capability (or role set) an actor needs and how the
scope base or owner is derived from the record being acted on.
"""
from __future__ import annotations

from .constants import Role
from .security import CapabilityGrant, OwnershipGrant, Policy, RoleGrant

_ADMIN_ONLY = frozenset({Role.ADMIN})


def _base_id(target):
    return target.base_id


def _personnel_base(assignment):
    return assignment.personnel.base_id if assignment.personnel is not None else None


def _personnel_user(assignment):
    return assignment.personnel.user_id if assignment.personnel is not None else None


# Bases / users
MANAGE_BASES = Policy("manage_bases", (RoleGrant(_ADMIN_ONLY),))
MANAGE_USERS = Policy("manage_users", (CapabilityGrant("canManageUsers"),))

# Personnel records: target is the Personnel row (or the draft with its base).
CREATE_PERSONNEL = Policy(
    "create_personnel",
    (
        RoleGrant(
            frozenset({Role.ADMIN, Role.BASE_COMMANDER, Role.LOGISTICS_OFFICER}),
            base_of=_base_id,
        ),
    ),
)
UPDATE_PERSONNEL = Policy(
    "update_personnel",
    (RoleGrant(frozenset({Role.ADMIN, Role.BASE_COMMANDER}), base_of=_base_id),),
)

# Asset catalogue: target is the Asset row.
VIEW_INVENTORY = Policy("view_inventory", (CapabilityGrant("canViewInventory", base_of=_base_id),))
ADD_ASSETS = Policy("add_assets", (CapabilityGrant("canAddAssets"),))
EDIT_ASSETS = Policy("edit_assets", (CapabilityGrant("canEditAssets"),))
DELETE_ASSETS = Policy("delete_assets", (CapabilityGrant("canDeleteAssets"),))
UPDATE_CONDITION = Policy("update_condition", (CapabilityGrant("canUpdateCondition", base_of=_base_id),))
CREATE_MAINTENANCE = Policy(
    "create_maintenance",
    (CapabilityGrant("canCreateMaintenance", base_of=_base_id),),
)

# Transfers: target is the Transfer (or the draft with from/to bases).
REQUEST_TRANSFER = Policy(
    "request_transfer",
    (CapabilityGrant("canRequestTransfers", base_of=lambda transfer: transfer.from_base_id),),
)
REVIEW_TRANSFER = Policy(
    "review_transfer",
    (CapabilityGrant("canApproveTransfers", base_of=lambda transfer: transfer.to_base_id),),
)

# Assignments: issue targets the Personnel and Asset rows, return targets the Assignment.
ISSUE_ASSETS = Policy("issue_assets", (CapabilityGrant("canIssueAssets", base_of=_base_id),))
RECEIVE_RETURN = Policy(
    "receive_return",
    (
        CapabilityGrant("canReceiveReturns", base_of=_personnel_base),
        OwnershipGrant(
            Role.PERSONNEL,
            owner_of=_personnel_user,
            denial="You can only return your own assignments",
        ),
    ),
)

# Asset requests: approval targets the requesting User; rejection has no scope.
REQUEST_ASSETS = Policy("request_assets", (CapabilityGrant("canRequestAssets"),))
APPROVE_REQUEST = Policy("approve_request", (CapabilityGrant("canIssueAssets", base_of=_base_id),))
REJECT_REQUEST = Policy("reject_request", (CapabilityGrant("canIssueAssets"),))

# Damage reports: staff scoped by the asset's base, personnel on their own assignment.
REPORT_DAMAGE = Policy("report_damage", (CapabilityGrant("canUpdateCondition", base_of=_base_id),))
REPORT_OWN_DAMAGE = Policy(
    "report_own_damage",
    (
        OwnershipGrant(
            Role.PERSONNEL,
            owner_of=_personnel_user,
            denial="You can only report damage on your own assignments",
        ),
    ),
)

# Read-side
VIEW_AUDIT_LOGS = Policy("view_audit_logs", (CapabilityGrant("canViewAuditLogs"),))
