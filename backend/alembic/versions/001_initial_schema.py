"""initial asset tracker schema

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None

ROLES = ("ADMIN", "BASE_COMMANDER", "LOGISTICS_OFFICER", "PERSONNEL")
EQUIPMENT_TYPES = ("VEHICLE", "WEAPON", "AMMUNITION", "EQUIPMENT", "OTHER")
CONDITIONS = ("GOOD", "FAIR", "POOR", "NEEDS_REPAIR", "DECOMMISSIONED")
REVIEW_STATUSES = ("PENDING", "APPROVED", "REJECTED")
SEVERITIES = ("MINOR", "MODERATE", "SEVERE")
AUDIT_ACTIONS = (
    "CREATE_BASE", "UPDATE_BASE", "DELETE_BASE",
    "CREATE_USER", "UPDATE_USER", "DELETE_USER",
    "CREATE_PERSONNEL", "UPDATE_PERSONNEL",
    "CREATE_ASSET", "UPDATE_ASSET", "DELETE_ASSET", "UPDATE_CONDITION",
    "PURCHASE", "TRANSFER_REQUEST", "TRANSFER_APPROVED", "TRANSFER_REJECTED",
    "ISSUE_ASSET", "RETURN_ASSET", "ASSET_REQUEST", "REQUEST_APPROVED", "REQUEST_REJECTED",
    "CREATE_MAINTENANCE", "DAMAGE_REPORT",
)
ENTITY_TYPES = (
    "BASE", "USER", "PERSONNEL", "ASSET", "PURCHASE", "TRANSFER",
    "ASSIGNMENT", "ASSET_REQUEST", "MAINTENANCE", "DAMAGE_REPORT",
)


def _in(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{value}'" for value in values)
    return f"{column} IN ({quoted})"


def _timestamp(name: str, **kwargs) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), **kwargs)


def upgrade() -> None:
    op.create_table(
        "bases",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("base_id", sa.Uuid(), sa.ForeignKey("bases.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint(_in("role", ROLES), name="chk_user_role"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_base_id", "users", ["base_id"])

    op.create_table(
        "personnel",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("rank", sa.String(100), nullable=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True),
        sa.Column("base_id", sa.Uuid(), sa.ForeignKey("bases.id"), nullable=True),
        _timestamp("created_at"),
    )
    op.create_index("ix_personnel_base_id", "personnel", ["base_id"])

    op.create_table(
        "assets",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("equipment_type", sa.String(30), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("condition", sa.String(30), nullable=False, server_default="GOOD"),
        sa.Column("base_id", sa.Uuid(), sa.ForeignKey("bases.id"), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("quantity >= 0", name="chk_asset_quantity_non_negative"),
        sa.CheckConstraint(_in("equipment_type", EQUIPMENT_TYPES), name="chk_asset_equipment_type"),
        sa.CheckConstraint(_in("condition", CONDITIONS), name="chk_asset_condition"),
    )
    op.create_index("ix_assets_equipment_type", "assets", ["equipment_type"])
    op.create_index("ix_assets_base_id", "assets", ["base_id"])
    op.create_index("idx_assets_name_base", "assets", ["name", "base_id"])

    op.create_table(
        "purchases",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("asset_id", sa.Uuid(), sa.ForeignKey("assets.id"), nullable=False),
        sa.Column("base_id", sa.Uuid(), sa.ForeignKey("bases.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        _timestamp("created_at"),
        sa.CheckConstraint("quantity > 0", name="chk_purchase_quantity_positive"),
    )
    op.create_index("ix_purchases_asset_id", "purchases", ["asset_id"])
    op.create_index("ix_purchases_base_id", "purchases", ["base_id"])
    op.create_index("ix_purchases_created_at", "purchases", ["created_at"])

    op.create_table(
        "transfers",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("asset_id", sa.Uuid(), sa.ForeignKey("assets.id"), nullable=False),
        sa.Column("from_base_id", sa.Uuid(), sa.ForeignKey("bases.id"), nullable=False),
        sa.Column("to_base_id", sa.Uuid(), sa.ForeignKey("bases.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("requested_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("approved_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        _timestamp("approved_at", nullable=True),
        sa.Column("rejected_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        _timestamp("rejected_at", nullable=True),
        _timestamp("created_at"),
        sa.CheckConstraint("quantity > 0", name="chk_transfer_quantity_positive"),
        sa.CheckConstraint(_in("status", REVIEW_STATUSES), name="chk_transfer_status"),
    )
    for column in ("asset_id", "from_base_id", "to_base_id", "status", "created_at"):
        op.create_index(f"ix_transfers_{column}", "transfers", [column])

    op.create_table(
        "asset_requests",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("asset_id", sa.Uuid(), sa.ForeignKey("assets.id"), nullable=False),
        sa.Column("requested_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("reviewed_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        _timestamp("reviewed_at", nullable=True),
        sa.Column("review_reason", sa.Text(), nullable=True),
        _timestamp("created_at"),
        sa.CheckConstraint("quantity > 0", name="chk_request_quantity_positive"),
        sa.CheckConstraint(_in("status", REVIEW_STATUSES), name="chk_request_status"),
    )
    for column in ("asset_id", "requested_by", "status", "created_at"):
        op.create_index(f"ix_asset_requests_{column}", "asset_requests", [column])

    op.create_table(
        "assignments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("asset_id", sa.Uuid(), sa.ForeignKey("assets.id"), nullable=False),
        sa.Column("personnel_id", sa.Uuid(), sa.ForeignKey("personnel.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("issued_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("request_id", sa.Uuid(), sa.ForeignKey("asset_requests.id"), nullable=True),
        _timestamp("issued_at"),
        _timestamp("returned_at", nullable=True),
        sa.Column("returned_to", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.CheckConstraint("quantity > 0", name="chk_assignment_quantity_positive"),
    )
    for column in ("asset_id", "personnel_id", "issued_at"):
        op.create_index(f"ix_assignments_{column}", "assignments", [column])

    op.create_table(
        "maintenance_records",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("asset_id", sa.Uuid(), sa.ForeignKey("assets.id"), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("maintenance_type", sa.String(100), nullable=True),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        _timestamp("created_at"),
    )
    op.create_index("ix_maintenance_records_asset_id", "maintenance_records", ["asset_id"])
    op.create_index("ix_maintenance_records_created_at", "maintenance_records", ["created_at"])

    op.create_table(
        "damage_reports",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("asset_id", sa.Uuid(), sa.ForeignKey("assets.id"), nullable=False),
        sa.Column("assignment_id", sa.Uuid(), sa.ForeignKey("assignments.id"), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("severity", sa.String(20), nullable=False, server_default="MINOR"),
        sa.Column("reported_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        _timestamp("reported_at"),
        sa.CheckConstraint(_in("severity", SEVERITIES), name="chk_damage_severity"),
    )
    for column in ("asset_id", "reported_by", "reported_at"):
        op.create_index(f"ix_damage_reports_{column}", "damage_reports", [column])

    # Append-only. base_id has no FK so history survives base deletion.
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("entity_type", sa.String(30), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("base_id", sa.Uuid(), nullable=True),
        _timestamp("timestamp", nullable=False),
        sa.CheckConstraint(_in("action", AUDIT_ACTIONS), name="chk_audit_action"),
        sa.CheckConstraint(_in("entity_type", ENTITY_TYPES), name="chk_audit_entity_type"),
    )
    for column in ("action", "user_id", "base_id", "timestamp"):
        op.create_index(f"ix_audit_logs_{column}", "audit_logs", [column])
    op.create_index("idx_audit_logs_entity", "audit_logs", ["entity_type", "entity_id"])


def downgrade() -> None:
    for table in (
        "audit_logs",
        "damage_reports",
        "maintenance_records",
        "assignments",
        "asset_requests",
        "transfers",
        "purchases",
        "assets",
        "personnel",
        "users",
        "bases",
    ):
        op.drop_table(table)
