"""Security helpers (identity, authorization gate, base scoping)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, TypeVar
from uuid import UUID

from sqlalchemy import false, or_
from sqlalchemy.orm import Session

from .constants import Role
from .domain_errors import ForbiddenError, NotFoundError
from .permissions import check_permission

T = TypeVar("T")


@dataclass(frozen=True)
class Identity:
    """Verified caller identity presented with every call."""

    id: UUID
    username: str
    role: Role
    base_id: UUID | None
    full_name: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def from_user(cls, user: Any) -> "Identity":
        return cls(
            id=user.id,
            username=user.username,
            role=Role(user.role),
            base_id=user.base_id,
            full_name=user.full_name,
        )


@dataclass(frozen=True)
class Decision:
    """Outcome of an authorization check."""

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(True)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(False, reason)

    def raise_if_denied(self) -> None:
        if not self.allowed:
            raise ForbiddenError(self.reason or "Access denied")


def authorize(identity: Identity, capability: str, scope_base_id: UUID | None = None) -> Decision:
    """Generic gate: capability from the role matrix, then base scope for non-admins."""
    if not check_permission(identity.role, capability):
        return Decision.deny(f"Permission denied: {capability} required")
    if scope_base_id is not None and not identity.is_admin and scope_base_id != identity.base_id:
        return Decision.deny("You can only access resources in your assigned base")
    return Decision.allow()


def require_permission(identity: Identity, capability: str, scope_base_id: UUID | None = None) -> None:
    """Enforce a role permission server-side."""
    authorize(identity, capability, scope_base_id).raise_if_denied()


# Workflow policies are composed from three grant kinds. A policy allows when
# any of its grants allows.


@dataclass(frozen=True)
class CapabilityGrant:
    """Matrix capability, optionally scoped to the base derived from the target."""

    capability: str
    base_of: Callable[[Any], UUID | None] | None = None

    def applies_to(self, identity: Identity) -> bool:
        return check_permission(identity.role, self.capability)

    def evaluate(self, identity: Identity, target: Any) -> Decision:
        scope = self.base_of(target) if self.base_of is not None and target is not None else None
        if self.base_of is not None and target is not None and scope is None and not identity.is_admin:
            return Decision.deny("Target is not assigned to a base")
        return authorize(identity, self.capability, scope)


@dataclass(frozen=True)
class OwnershipGrant:
    """Actors of ``role`` may act only on records they own."""

    role: Role
    owner_of: Callable[[Any], UUID | None]
    denial: str = "You can only act on your own records"

    def applies_to(self, identity: Identity) -> bool:
        return identity.role == self.role

    def evaluate(self, identity: Identity, target: Any) -> Decision:
        if identity.role != self.role:
            return Decision.deny(f"Role {identity.role.value} is not allowed")
        if target is None or self.owner_of(target) != identity.id:
            return Decision.deny(self.denial)
        return Decision.allow()


@dataclass(frozen=True)
class RoleGrant:
    """Role membership for operations the matrix does not name, optionally base scoped."""

    roles: frozenset[Role]
    base_of: Callable[[Any], UUID | None] | None = None

    def applies_to(self, identity: Identity) -> bool:
        return identity.role in self.roles

    def evaluate(self, identity: Identity, target: Any) -> Decision:
        if identity.role not in self.roles:
            allowed = ", ".join(sorted(role.value for role in self.roles))
            return Decision.deny(f"This action requires one of these roles: {allowed}")
        if self.base_of is None or identity.is_admin or target is None:
            return Decision.allow()
        if self.base_of(target) != identity.base_id:
            return Decision.deny("You can only access resources in your assigned base")
        return Decision.allow()


Grant = CapabilityGrant | OwnershipGrant | RoleGrant


@dataclass(frozen=True)
class Policy:
    name: str
    grants: tuple[Grant, ...]

    def evaluate(self, identity: Identity, target: Any = None) -> Decision:
        preferred: Decision | None = None
        fallback: Decision | None = None
        for grant in self.grants:
            decision = grant.evaluate(identity, target)
            if decision.allowed:
                return decision
            # Report the reason from a grant the caller's role could have satisfied.
            if preferred is None and grant.applies_to(identity):
                preferred = decision
            if fallback is None:
                fallback = decision
        if preferred is not None:
            return preferred
        if fallback is not None:
            return fallback
        return Decision.deny("Access denied")


def enforce(policy: Policy, identity: Identity, target: Any = None) -> None:
    """Raise ForbiddenError unless the policy allows the identity to act on target."""
    policy.evaluate(identity, target).raise_if_denied()


def can(policy: Policy, identity: Identity, target: Any = None) -> bool:
    return policy.evaluate(identity, target).allowed


def require_entity(db: Session, model: type[T], *, entity_id: UUID, not_found: str, for_update: bool = False) -> T:
    """Load an entity by id or raise NotFound."""
    query = db.query(model).filter(getattr(model, "id") == entity_id)  # noqa: B009
    if for_update:
        query = query.with_for_update()
    entity = query.first()
    if entity is None:
        raise NotFoundError(not_found)
    return entity


def ensure_visible(visible: bool, not_found: str) -> None:
    """Out-of-scope single-record reads look exactly like missing records."""
    if not visible:
        raise NotFoundError(not_found)


def apply_base_scope(query, current_user: Identity, *base_columns):
    """Restrict a list query to rows of the caller's base (any column may match).

    ADMIN sees everything; a non-admin without a base sees nothing.
    """
    if current_user.is_admin:
        return query
    if current_user.base_id is None:
        return query.filter(false())
    return query.filter(or_(*(column == current_user.base_id for column in base_columns)))


def in_base_scope(current_user: Identity, *base_ids: UUID | None) -> bool:
    if current_user.is_admin:
        return True
    return current_user.base_id is not None and current_user.base_id in base_ids
