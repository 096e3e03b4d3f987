"""Enumerations shared by models, schemas and use-cases."""
from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    ADMIN = "ADMIN"
    BASE_COMMANDER = "BASE_COMMANDER"
    LOGISTICS_OFFICER = "LOGISTICS_OFFICER"
    PERSONNEL = "PERSONNEL"


class EquipmentType(str, Enum):
    VEHICLE = "VEHICLE"
    WEAPON = "WEAPON"
    AMMUNITION = "AMMUNITION"
    EQUIPMENT = "EQUIPMENT"
    OTHER = "OTHER"


class AssetCondition(str, Enum):
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"
    NEEDS_REPAIR = "NEEDS_REPAIR"
    DECOMMISSIONED = "DECOMMISSIONED"


class ReviewStatus(str, Enum):
    """Lifecycle of transfers and asset requests."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class DamageSeverity(str, Enum):
    MINOR = "MINOR"
    MODERATE = "MODERATE"
    SEVERE = "SEVERE"


class AuditAction(str, Enum):
    CREATE_BASE = "CREATE_BASE"
    UPDATE_BASE = "UPDATE_BASE"
    DELETE_BASE = "DELETE_BASE"
    CREATE_USER = "CREATE_USER"
    UPDATE_USER = "UPDATE_USER"
    DELETE_USER = "DELETE_USER"
    CREATE_PERSONNEL = "CREATE_PERSONNEL"
    UPDATE_PERSONNEL = "UPDATE_PERSONNEL"
    CREATE_ASSET = "CREATE_ASSET"
    UPDATE_ASSET = "UPDATE_ASSET"
    DELETE_ASSET = "DELETE_ASSET"
    UPDATE_CONDITION = "UPDATE_CONDITION"
    PURCHASE = "PURCHASE"
    TRANSFER_REQUEST = "TRANSFER_REQUEST"
    TRANSFER_APPROVED = "TRANSFER_APPROVED"
    TRANSFER_REJECTED = "TRANSFER_REJECTED"
    ISSUE_ASSET = "ISSUE_ASSET"
    RETURN_ASSET = "RETURN_ASSET"
    ASSET_REQUEST = "ASSET_REQUEST"
    REQUEST_APPROVED = "REQUEST_APPROVED"
    REQUEST_REJECTED = "REQUEST_REJECTED"
    CREATE_MAINTENANCE = "CREATE_MAINTENANCE"
    DAMAGE_REPORT = "DAMAGE_REPORT"


class EntityType(str, Enum):
    BASE = "BASE"
    USER = "USER"
    PERSONNEL = "PERSONNEL"
    ASSET = "ASSET"
    PURCHASE = "PURCHASE"
    TRANSFER = "TRANSFER"
    ASSIGNMENT = "ASSIGNMENT"
    ASSET_REQUEST = "ASSET_REQUEST"
    MAINTENANCE = "MAINTENANCE"
    DAMAGE_REPORT = "DAMAGE_REPORT"


def enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]
