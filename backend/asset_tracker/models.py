"""SQLAlchemy models."""
from sqlalchemy import (
    Boolean, Column, String, Integer, DateTime, Text, Uuid,
    ForeignKey, CheckConstraint, Index,
)
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime, timezone

from .constants import (
    AssetCondition, AuditAction, DamageSeverity, EntityType, EquipmentType,
    ReviewStatus, Role, enum_values,
)
from .database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MilitaryBase(Base):
    """Base (site) that holds stock and personnel."""
    __tablename__ = "bases"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    location = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class User(Base):
    """Login identity."""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)
    role = Column(String(50), nullable=False, index=True, default=Role.PERSONNEL.value)
    base_id = Column(Uuid, ForeignKey("bases.id"), nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(role.in_(enum_values(Role)), name="chk_user_role"),
    )

    # Relationships
    base = relationship("MilitaryBase")


class Personnel(Base):
    """Physical person; optionally linked to at most one login."""
    __tablename__ = "personnel"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    rank = Column(String(100), nullable=True)
    # Non-owning link: deleting a user nulls it instead of cascading.
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True)
    base_id = Column(Uuid, ForeignKey("bases.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    user = relationship("User")
    base = relationship("MilitaryBase")


class Asset(Base):
    """Stock of one asset kind held at one base."""
    __tablename__ = "assets"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    equipment_type = Column(String(30), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    condition = Column(String(30), nullable=False, default=AssetCondition.GOOD.value)
    base_id = Column(Uuid, ForeignKey("bases.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="chk_asset_quantity_non_negative"),
        CheckConstraint(equipment_type.in_(enum_values(EquipmentType)), name="chk_asset_equipment_type"),
        CheckConstraint(condition.in_(enum_values(AssetCondition)), name="chk_asset_condition"),
        Index("idx_assets_name_base", "name", "base_id"),
    )

    # Relationships
    base = relationship("MilitaryBase")


class Purchase(Base):
    """Append-only stock intake."""
    __tablename__ = "purchases"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    asset_id = Column(Uuid, ForeignKey("assets.id"), nullable=False, index=True)
    base_id = Column(Uuid, ForeignKey("bases.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    created_by = Column(Uuid, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_purchase_quantity_positive"),
    )

    # Relationships
    asset = relationship("Asset")
    base = relationship("MilitaryBase")
    creator = relationship("User")


class Transfer(Base):
    """Movement of stock between two bases."""
    __tablename__ = "transfers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    asset_id = Column(Uuid, ForeignKey("assets.id"), nullable=False, index=True)
    from_base_id = Column(Uuid, ForeignKey("bases.id"), nullable=False, index=True)
    to_base_id = Column(Uuid, ForeignKey("bases.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=ReviewStatus.PENDING.value, index=True)
    requested_by = Column(Uuid, ForeignKey("users.id"), nullable=True)
    approved_by = Column(Uuid, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_by = Column(Uuid, ForeignKey("users.id"), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_transfer_quantity_positive"),
        CheckConstraint(status.in_(enum_values(ReviewStatus)), name="chk_transfer_status"),
    )

    # Relationships
    asset = relationship("Asset")
    from_base = relationship("MilitaryBase", foreign_keys=[from_base_id])
    to_base = relationship("MilitaryBase", foreign_keys=[to_base_id])
    requester = relationship("User", foreign_keys=[requested_by])
    approver = relationship("User", foreign_keys=[approved_by])


class Assignment(Base):
    """Stock issued to a person; open while returned_at is null."""
    __tablename__ = "assignments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    asset_id = Column(Uuid, ForeignKey("assets.id"), nullable=False, index=True)
    personnel_id = Column(Uuid, ForeignKey("personnel.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    issued_by = Column(Uuid, ForeignKey("users.id"), nullable=True)
    request_id = Column(Uuid, ForeignKey("asset_requests.id"), nullable=True)
    issued_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    returned_at = Column(DateTime(timezone=True), nullable=True)
    returned_to = Column(Uuid, ForeignKey("users.id"), nullable=True)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_assignment_quantity_positive"),
    )

    # Relationships
    asset = relationship("Asset")
    personnel = relationship("Personnel")
    issuer = relationship("User", foreign_keys=[issued_by])

    @property
    def is_open(self) -> bool:
        return self.returned_at is None


class AssetRequest(Base):
    """Request by personnel for stock to be issued to them."""
    __tablename__ = "asset_requests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    asset_id = Column(Uuid, ForeignKey("assets.id"), nullable=False, index=True)
    requested_by = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    reason = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=ReviewStatus.PENDING.value, index=True)
    reviewed_by = Column(Uuid, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    review_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_request_quantity_positive"),
        CheckConstraint(status.in_(enum_values(ReviewStatus)), name="chk_request_status"),
    )

    # Relationships
    asset = relationship("Asset")
    requester = relationship("User", foreign_keys=[requested_by])
    reviewer = relationship("User", foreign_keys=[reviewed_by])


class MaintenanceRecord(Base):
    """Maintenance history entry."""
    __tablename__ = "maintenance_records"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    asset_id = Column(Uuid, ForeignKey("assets.id"), nullable=False, index=True)
    description = Column(Text, nullable=True)
    maintenance_type = Column(String(100), nullable=True)
    created_by = Column(Uuid, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    # Relationships
    asset = relationship("Asset")
    creator = relationship("User")


class DamageReport(Base):
    """Damage history entry."""
    __tablename__ = "damage_reports"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    asset_id = Column(Uuid, ForeignKey("assets.id"), nullable=False, index=True)
    assignment_id = Column(Uuid, ForeignKey("assignments.id"), nullable=True)
    description = Column(Text, nullable=True)
    severity = Column(String(20), nullable=False, default=DamageSeverity.MINOR.value)
    reported_by = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)
    reported_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    __table_args__ = (
        CheckConstraint(severity.in_(enum_values(DamageSeverity)), name="chk_damage_severity"),
    )

    # Relationships
    asset = relationship("Asset")
    reporter = relationship("User")


class AuditLog(Base):
    """Append-only audit entry."""
    __tablename__ = "audit_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    action = Column(String(50), nullable=False, index=True)
    entity_type = Column(String(30), nullable=False)
    entity_id = Column(Uuid, nullable=False)
    details = Column(Text, nullable=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)
    # Base of the affected entity; plain column so deleted bases keep their history.
    base_id = Column(Uuid, nullable=True, index=True)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    __table_args__ = (
        CheckConstraint(action.in_(enum_values(AuditAction)), name="chk_audit_action"),
        CheckConstraint(entity_type.in_(enum_values(EntityType)), name="chk_audit_entity_type"),
        Index("idx_audit_logs_entity", "entity_type", "entity_id"),
    )

    # Relationships
    user = relationship("User")
