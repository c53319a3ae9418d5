"""Initial schema - users, wallets, credits, communities, marketplace, uploads.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
import uuid
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", UUID(as_uuid=True), primary_key=True)


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def _user_fk(name: str = "user_id", nullable: bool = False) -> sa.Column:
    return sa.Column(name, UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("first_name", sa.Text, nullable=False),
        sa.Column("last_name", sa.Text, nullable=False),
        sa.Column("phone", sa.Text, nullable=True),
        sa.Column("user_type", sa.String(20), nullable=False),
        sa.Column("password_hash", sa.Text, nullable=True),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("is_kyc_complete", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("kyc_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        _created_at(),
        _created_at("updated_at"),
    )

    op.create_table(
        "wallets",
        _id(),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("balance", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("total_earned", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("total_spent", sa.Numeric(15, 2), nullable=False, server_default="0"),
        _created_at(),
        _created_at("updated_at"),
    )

    op.create_table(
        "wallet_transactions",
        _id(),
        _user_fk(),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("balance_before", sa.Numeric(15, 2), nullable=False),
        sa.Column("balance_after", sa.Numeric(15, 2), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("reference_type", sa.String(50), nullable=True),
        sa.Column("reference_id", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="completed"),
        _created_at(),
    )
    op.create_index("ix_wallet_transactions_user_id", "wallet_transactions", ["user_id"])

    op.create_table(
        "credit_configs",
        _id(),
        sa.Column("action", sa.String(50), nullable=False, unique=True),
        sa.Column("cost", sa.Numeric(15, 2), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        _created_at("updated_at"),
    )

    op.create_table(
        "projects",
        _id(),
        _user_fk(),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("industry", sa.Text, nullable=False),
        sa.Column("funding_goal", sa.Numeric(15, 2), nullable=False),
        sa.Column("minimum_investment", sa.Numeric(15, 2), nullable=False),
        sa.Column("current_funding", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("campaign_duration", sa.Integer, nullable=False, server_default="30"),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        _created_at(),
    )

    op.create_table(
        "investments",
        _id(),
        sa.Column("project_id", UUID(as_uuid=True), sa.ForeignKey("projects.id"), nullable=False),
        _user_fk("investor_id"),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="invest"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("message", sa.Text, nullable=True),
        _created_at(),
    )

    op.create_table(
        "documents",
        _id(),
        _user_fk(),
        sa.Column("project_id", UUID(as_uuid=True), sa.ForeignKey("projects.id"), nullable=True),
        sa.Column("document_type", sa.String(40), nullable=False),
        sa.Column("file_name", sa.Text, nullable=False),
        sa.Column("file_path", sa.Text, nullable=False),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        _created_at(),
    )

    op.create_table(
        "communities",
        _id(),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("category", sa.String(30), nullable=False, server_default="networking"),
        _user_fk("creator_id"),
        sa.Column("is_private", sa.Boolean, nullable=False, server_default="false"),
        _created_at(),
    )

    op.create_table(
        "community_members",
        _id(),
        sa.Column(
            "community_id", UUID(as_uuid=True),
            sa.ForeignKey("communities.id", ondelete="CASCADE"), nullable=False,
        ),
        _user_fk(),
        sa.Column("role", sa.String(20), nullable=False, server_default="member"),
        _created_at("joined_at"),
        sa.UniqueConstraint("community_id", "user_id", name="uq_community_member"),
    )

    op.create_table(
        "community_posts",
        _id(),
        sa.Column(
            "community_id", UUID(as_uuid=True),
            sa.ForeignKey("communities.id", ondelete="CASCADE"), nullable=False,
        ),
        _user_fk("author_id"),
        sa.Column("content", sa.Text, nullable=False),
        _created_at(),
    )

    op.create_table(
        "connections",
        _id(),
        _user_fk("requester_id"),
        _user_fk("recipient_id"),
        sa.Column("project_id", UUID(as_uuid=True), sa.ForeignKey("projects.id"), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("message", sa.Text, nullable=True),
        _created_at(),
        _created_at("updated_at"),
    )

    op.create_table(
        "notifications",
        _id(),
        _user_fk(),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("type", sa.String(30), nullable=False, server_default="general"),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default="false"),
        _created_at(),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "bidding_projects",
        _id(),
        _user_fk(),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("category", sa.Text, nullable=False),
        sa.Column("budget", sa.Numeric(15, 2), nullable=False),
        sa.Column("timeline", sa.Text, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="open"),
        sa.Column("selected_bid_id", UUID(as_uuid=True), nullable=True),
        _created_at(),
    )

    op.create_table(
        "project_bids",
        _id(),
        sa.Column(
            "project_id", UUID(as_uuid=True),
            sa.ForeignKey("bidding_projects.id"), nullable=False,
        ),
        _user_fk(),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("timeline", sa.Text, nullable=False),
        sa.Column("proposal", sa.Text, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        _created_at(),
    )

    op.create_table(
        "companies",
        _id(),
        _user_fk("owner_id"),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("industry", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        _created_at(),
    )

    op.create_table(
        "events",
        _id(),
        _user_fk("organizer_id"),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("location", sa.Text, nullable=True),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ticket_price", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("max_participants", sa.Integer, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="upcoming"),
        _created_at(),
    )

    op.create_table(
        "event_participants",
        _id(),
        sa.Column("event_id", UUID(as_uuid=True), sa.ForeignKey("events.id"), nullable=False),
        _user_fk(),
        _created_at("registered_at"),
        sa.UniqueConstraint("event_id", "user_id", name="uq_event_participant"),
    )

    op.create_table(
        "object_acls",
        _id(),
        sa.Column("object_path", sa.String(255), nullable=False, unique=True),
        _user_fk("owner_id", nullable=True),
        sa.Column("visibility", sa.String(20), nullable=False, server_default="public"),
        _created_at(),
    )

    credit_configs = sa.table(
        "credit_configs",
        sa.column("id", UUID(as_uuid=True)),
        sa.column("action", sa.String),
        sa.column("cost", sa.Numeric),
        sa.column("is_active", sa.Boolean),
    )
    op.bulk_insert(credit_configs, [
        {"id": uuid.UUID(uid), "action": action, "cost": cost, "is_active": True}
        for uid, action, cost in (
            ("6f1c1a9e-0000-4000-8000-000000000001", "innovation", 100),
            ("6f1c1a9e-0000-4000-8000-000000000002", "job", 50),
            ("6f1c1a9e-0000-4000-8000-000000000003", "investor_connection", 10),
            ("6f1c1a9e-0000-4000-8000-000000000004", "community_create", 100),
            ("6f1c1a9e-0000-4000-8000-000000000005", "community_join", 10),
            ("6f1c1a9e-0000-4000-8000-000000000006", "event", 50),
        )
    ])


def downgrade() -> None:
    for table in (
        "object_acls", "event_participants", "events", "companies",
        "project_bids", "bidding_projects", "notifications", "connections",
        "community_posts", "community_members", "communities",
        "documents", "investments", "projects", "credit_configs",
        "wallet_transactions", "wallets", "users",
    ):
        op.drop_table(table)
