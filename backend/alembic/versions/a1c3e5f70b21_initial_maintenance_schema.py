"""Initial schema: AppUser, MaintenanceTeam, TeamMember, Equipment, MaintenanceRequest

Revision ID: a1c3e5f70b21
Revises:
Create Date: 2026-10-18 09:12:44.310522

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c3e5f70b21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "AppUser",
        sa.Column("UserID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("Email", sa.String(200), nullable=False),
        sa.Column("FullName", sa.String(100), nullable=False),
        sa.Column("HashedPassword", sa.String(255), nullable=False),
        sa.Column("Role", sa.String(20), nullable=False, server_default=sa.text("'requester'")),
        sa.Column("IsActive", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("CreatedAt", sa.DateTime(), nullable=False),
        sa.Column("UpdatedAt", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("Email", name="UQ_AppUser_Email"),
        sa.CheckConstraint(
            "Role in ('requester','technician','manager','admin')", name="CK_AppUser_Role"
        ),
    )

    op.create_table(
        "MaintenanceTeam",
        sa.Column("TeamID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("Name", sa.String(100), nullable=False),
        sa.Column("Description_s", sa.String(1000)),
        sa.Column("IsActive", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("CreatedAt", sa.DateTime(), nullable=False),
        sa.Column("UpdatedAt", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("Name", name="UQ_MaintenanceTeam_Name"),
    )

    op.create_table(
        "TeamMember",
        sa.Column("TeamID", sa.Integer(), sa.ForeignKey("MaintenanceTeam.TeamID", ondelete="CASCADE"), primary_key=True),
        sa.Column("UserID", sa.Integer(), sa.ForeignKey("AppUser.UserID", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "Equipment",
        sa.Column("EquipmentID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("Name", sa.String(200), nullable=False),
        sa.Column("SerialNumber", sa.String(100), nullable=False),
        sa.Column("Category", sa.String(50), nullable=False),
        sa.Column("Department", sa.String(50), nullable=False),
        sa.Column("Location", sa.String(200), nullable=False),
        sa.Column("AssignedEmployeeID", sa.Integer(), sa.ForeignKey("AppUser.UserID")),
        sa.Column("DefaultTeamID", sa.Integer(), sa.ForeignKey("MaintenanceTeam.TeamID")),
        sa.Column("PurchaseDate", sa.Date()),
        sa.Column("WarrantyExpiry", sa.Date()),
        sa.Column("IsScrap", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("CreatedAt", sa.DateTime(), nullable=False),
        sa.Column("UpdatedAt", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("SerialNumber", name="UQ_Equipment_SerialNumber"),
    )

    op.create_table(
        "MaintenanceRequest",
        sa.Column("RequestID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("Subject", sa.String(200), nullable=False),
        sa.Column("Description_s", sa.String(2000)),
        sa.Column("RequestType", sa.String(20), nullable=False),
        sa.Column("Status_s", sa.String(20), nullable=False, server_default=sa.text("'New'")),
        sa.Column("EquipmentID", sa.Integer(), sa.ForeignKey("Equipment.EquipmentID"), nullable=False),
        sa.Column("TeamID", sa.Integer(), sa.ForeignKey("MaintenanceTeam.TeamID"), nullable=False),
        sa.Column("AssignedToID", sa.Integer(), sa.ForeignKey("AppUser.UserID")),
        sa.Column("CreatedByID", sa.Integer(), sa.ForeignKey("AppUser.UserID"), nullable=False),
        sa.Column("ScheduledDate", sa.DateTime()),
        sa.Column("CompletedAt", sa.DateTime()),
        sa.Column("DurationHours", sa.Float()),
        sa.Column("CreatedAt", sa.DateTime(), nullable=False),
        sa.Column("UpdatedAt", sa.DateTime(), nullable=False),
        sa.Column("Version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.CheckConstraint(
            "Status_s in ('New','InProgress','Repaired','Scrap')", name="CK_Request_Status"
        ),
        sa.CheckConstraint(
            "RequestType in ('Corrective','Preventive')", name="CK_Request_Type"
        ),
        sa.CheckConstraint(
            "DurationHours IS NULL OR DurationHours > 0", name="CK_Request_Duration_Positive"
        ),
    )
    op.create_index("IX_Request_Team_Status", "MaintenanceRequest", ["TeamID", "Status_s"])
    op.create_index("IX_Request_Assignee", "MaintenanceRequest", ["AssignedToID"])
    op.create_index("IX_Request_Scheduled", "MaintenanceRequest", ["ScheduledDate"])


def downgrade() -> None:
    op.drop_index("IX_Request_Scheduled", table_name="MaintenanceRequest")
    op.drop_index("IX_Request_Assignee", table_name="MaintenanceRequest")
    op.drop_index("IX_Request_Team_Status", table_name="MaintenanceRequest")
    op.drop_table("MaintenanceRequest")
    op.drop_table("Equipment")
    op.drop_table("TeamMember")
    op.drop_table("MaintenanceTeam")
    op.drop_table("AppUser")
