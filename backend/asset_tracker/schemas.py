"""Pydantic schemas for API."""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime
from uuid import UUID

from .constants import AssetCondition, DamageSeverity, EquipmentType, ReviewStatus, Role


# Base schemas
class BaseCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    location: Optional[str] = None


class BaseUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    location: Optional[str] = None


class BaseResponse(BaseModel):
    id: UUID
    name: str
    location: Optional[str] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class BaseBrief(BaseModel):
    """Brief base info for nested responses."""
    id: UUID
    name: str
    model_config = ConfigDict(from_attributes=True)


# User schemas
class UserBase(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    full_name: Optional[str] = None
    role: Role
    base_id: Optional[UUID] = None


class UserCreate(UserBase):
    password: str


class UserUpdate(BaseModel):
    full_name: Optional[str] = None
    role: Optional[Role] = None
    base_id: Optional[UUID] = None
    password: Optional[str] = None
    is_active: Optional[bool] = None


class UserResponse(BaseModel):
    id: UUID
    username: str
    full_name: Optional[str] = None
    role: Role
    base_id: Optional[UUID] = None
    is_active: bool
    base: Optional[BaseBrief] = None
    model_config = ConfigDict(from_attributes=True)


# Auth schemas
class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class PermissionsResponse(BaseModel):
    role: Role
    permissions: dict[str, bool]


# Personnel schemas
class PersonnelCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    rank: Optional[str] = None
    user_id: Optional[UUID] = None
    base_id: Optional[UUID] = None


class PersonnelUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    rank: Optional[str] = None
    user_id: Optional[UUID] = None
    base_id: Optional[UUID] = None


class PersonnelResponse(BaseModel):
    id: UUID
    name: str
    rank: Optional[str] = None
    user_id: Optional[UUID] = None
    base_id: Optional[UUID] = None
    base: Optional[BaseBrief] = None
    model_config = ConfigDict(from_attributes=True)


# Asset schemas
class AssetCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    equipment_type: EquipmentType
    condition: AssetCondition = AssetCondition.GOOD
    base_id: UUID
    # Range is checked by the ledger so it surfaces as INVALID_QUANTITY.
    quantity: int = 0


class AssetUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    equipment_type: Optional[EquipmentType] = None


class ConditionUpdate(BaseModel):
    condition: AssetCondition


class AssetResponse(BaseModel):
    id: UUID
    name: str
    equipment_type: EquipmentType
    quantity: int
    condition: AssetCondition
    base_id: UUID
    base: Optional[BaseBrief] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class AssetBrief(BaseModel):
    id: UUID
    name: str
    equipment_type: EquipmentType
    base_id: UUID
    model_config = ConfigDict(from_attributes=True)


# Purchase schemas
class PurchaseCreate(BaseModel):
    asset_id: UUID
    quantity: int


class PurchaseResponse(BaseModel):
    id: UUID
    asset_id: UUID
    base_id: UUID
    quantity: int
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    asset: Optional[AssetBrief] = None
    model_config = ConfigDict(from_attributes=True)


# Transfer schemas
class TransferCreate(BaseModel):
    asset_id: UUID
    from_base_id: UUID
    to_base_id: UUID
    quantity: int


class TransferResponse(BaseModel):
    id: UUID
    asset_id: UUID
    from_base_id: UUID
    to_base_id: UUID
    quantity: int
    status: ReviewStatus
    requested_by: Optional[UUID] = None
    approved_by: Optional[UUID] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[UUID] = None
    rejected_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    asset: Optional[AssetBrief] = None
    model_config = ConfigDict(from_attributes=True)


# Assignment schemas
class AssignmentCreate(BaseModel):
    asset_id: UUID
    personnel_id: UUID
    quantity: int


class AssignmentResponse(BaseModel):
    id: UUID
    asset_id: UUID
    personnel_id: UUID
    quantity: int
    issued_by: Optional[UUID] = None
    request_id: Optional[UUID] = None
    issued_at: Optional[datetime] = None
    returned_at: Optional[datetime] = None
    returned_to: Optional[UUID] = None
    is_open: bool
    asset: Optional[AssetBrief] = None
    model_config = ConfigDict(from_attributes=True)


# Asset request schemas
class AssetRequestCreate(BaseModel):
    asset_id: UUID
    quantity: int
    reason: Optional[str] = None


class AssetRequestReview(BaseModel):
    reason: Optional[str] = None


class AssetRequestResponse(BaseModel):
    id: UUID
    asset_id: UUID
    requested_by: UUID
    quantity: int
    reason: Optional[str] = None
    status: ReviewStatus
    reviewed_by: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None
    review_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    asset: Optional[AssetBrief] = None
    model_config = ConfigDict(from_attributes=True)


class AssetRequestApproval(BaseModel):
    request: AssetRequestResponse
    assignment: AssignmentResponse


# Maintenance / damage schemas
class MaintenanceCreate(BaseModel):
    asset_id: UUID
    description: Optional[str] = None
    maintenance_type: Optional[str] = Field(default=None, max_length=100)
    condition: Optional[AssetCondition] = None


class MaintenanceResponse(BaseModel):
    id: UUID
    asset_id: UUID
    description: Optional[str] = None
    maintenance_type: Optional[str] = None
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class DamageReportCreate(BaseModel):
    asset_id: UUID
    assignment_id: Optional[UUID] = None
    description: Optional[str] = None
    severity: DamageSeverity = DamageSeverity.MINOR


class DamageReportResponse(BaseModel):
    id: UUID
    asset_id: UUID
    assignment_id: Optional[UUID] = None
    description: Optional[str] = None
    severity: DamageSeverity
    reported_by: Optional[UUID] = None
    reported_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


# Audit schemas
class AuditLogResponse(BaseModel):
    id: UUID
    action: str
    entity_type: str
    entity_id: UUID
    details: Optional[str] = None
    user_id: Optional[UUID] = None
    base_id: Optional[UUID] = None
    timestamp: datetime
    model_config = ConfigDict(from_attributes=True)


# Dashboard schemas
class PersonnelDashboard(BaseModel):
    open_assignments: int
    pending_requests: int
    assignments: list[AssignmentResponse]


class BaseDashboard(BaseModel):
    base_id: Optional[UUID] = None
    equipment_type: Optional[EquipmentType] = None
    opening_balance: int
    closing_balance: int
    net_movement: int
    purchases: int
    transfers_in: int
    transfers_out: int
    assigned: int
    pending_transfers: int
    pending_requests: int
