"""Initial schema: users, solar panels, requests and request items

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("login", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("is_moderator", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_login", "users", ["login"], unique=True)

    op.create_table(
        "solar_panels",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("type", sa.String(100), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("power", sa.Integer(), nullable=False),
        sa.Column("width", sa.Integer(), nullable=False),
        sa.Column("height", sa.Integer(), nullable=False),
        sa.Column("image", sa.String(512), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("width > 0 AND height > 0 AND power >= 0", name="ck_solar_panels_dimensions"),
    )
    op.create_index("ix_solar_panels_title", "solar_panels", ["title"], unique=False)

    op.create_table(
        "solar_panel_requests",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("creator_id", sa.Integer(), nullable=False),
        sa.Column("moderator_id", sa.Integer(), nullable=True),
        sa.Column("insolation", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_power", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("formed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("moderated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["creator_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["moderator_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_solar_panel_requests_status", "solar_panel_requests", ["status"], unique=False)
    op.create_index("ix_solar_panel_requests_creator_id", "solar_panel_requests", ["creator_id"], unique=False)
    op.create_index("ix_solar_panel_requests_formed_at", "solar_panel_requests", ["formed_at"], unique=False)
    # One draft (cart) per creator
    op.create_index(
        "uq_solar_panel_requests_one_draft_per_creator",
        "solar_panel_requests",
        ["creator_id"],
        unique=True,
        postgresql_where=sa.text("status = 'draft'"),
        sqlite_where=sa.text("status = 'draft'"),
    )

    op.create_table(
        "request_panels",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("request_id", sa.Integer(), nullable=False),
        sa.Column("panel_id", sa.Integer(), nullable=False),
        sa.Column("area", sa.Float(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["request_id"], ["solar_panel_requests.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["panel_id"], ["solar_panels.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("request_id", "panel_id", name="uq_request_panels_request_panel"),
    )
    op.create_index("ix_request_panels_request_id", "request_panels", ["request_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_request_panels_request_id", "request_panels")
    op.drop_table("request_panels")
    op.drop_index("uq_solar_panel_requests_one_draft_per_creator", "solar_panel_requests")
    op.drop_index("ix_solar_panel_requests_formed_at", "solar_panel_requests")
    op.drop_index("ix_solar_panel_requests_creator_id", "solar_panel_requests")
    op.drop_index("ix_solar_panel_requests_status", "solar_panel_requests")
    op.drop_table("solar_panel_requests")
    op.drop_index("ix_solar_panels_title", "solar_panels")
    op.drop_table("solar_panels")
    op.drop_index("ix_users_login", "users")
    op.drop_table("users")
