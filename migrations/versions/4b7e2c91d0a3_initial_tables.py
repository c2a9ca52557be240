"""initial_tables

Revision ID: 4b7e2c91d0a3
Revises:
Create Date: 2026-10-19 09:12:44.301157

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4b7e2c91d0a3"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # AGENCIES
    op.create_table(
        "agencies",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("kind", sa.String(32), nullable=False),
        sa.Column("department", sa.String(8), nullable=False, server_default=""),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("refers_to_agency_id", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["refers_to_agency_id"], ["agencies.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    # USERS
    op.create_table(
        "users",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False, server_default=""),
        sa.Column("last_name", sa.String(), nullable=False, server_default=""),
        sa.Column("is_backoffice_admin", sa.Boolean(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_table(
        "users__agencies",
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("agency_id", sa.String(), nullable=False),
        sa.Column("roles", sa.JSON(), nullable=False),
        sa.Column("is_notified_by_email", sa.Boolean(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["agency_id"], ["agencies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "agency_id"),
    )
    op.create_index("idx_users_agencies_agency_id", "users__agencies", ["agency_id"])

    # CONVENTIONS
    op.create_table(
        "conventions",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("status_justification", sa.Text(), nullable=True),
        sa.Column("agency_id", sa.String(), nullable=False),
        sa.Column("signatories", sa.JSON(), nullable=False),
        sa.Column("establishment_tutor", sa.JSON(), nullable=False),
        sa.Column("validators", sa.JSON(), nullable=True),
        sa.Column("date_submission", sa.DateTime(timezone=True), nullable=False),
        sa.Column("date_start", sa.Date(), nullable=False),
        sa.Column("date_end", sa.Date(), nullable=False),
        sa.Column("date_validation", sa.DateTime(timezone=True), nullable=True),
        sa.Column("date_approval", sa.DateTime(timezone=True), nullable=True),
        sa.Column("internship_kind", sa.String(32), nullable=False),
        sa.Column("siret", sa.String(14), nullable=False, server_default=""),
        sa.Column("business_name", sa.String(), nullable=False, server_default=""),
        sa.Column("content", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["agency_id"], ["agencies.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_conventions_agency_id", "conventions", ["agency_id"])
    op.create_index("idx_conventions_status", "conventions", ["status"])

    # ASSESSMENTS
    op.create_table(
        "assessments",
        sa.Column("convention_id", sa.String(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["convention_id"], ["conventions.id"]),
        sa.PrimaryKeyConstraint("convention_id"),
    )

    # NOTIFICATIONS
    op.create_table(
        "notifications",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("kind", sa.String(8), nullable=False),
        sa.Column("template_kind", sa.String(64), nullable=False),
        sa.Column("recipient", sa.String(), nullable=False),
        sa.Column("params", sa.JSON(), nullable=False),
        sa.Column("convention_id", sa.String(), nullable=True),
        sa.Column("agency_id", sa.String(), nullable=True),
        sa.Column("establishment_siret", sa.String(14), nullable=True),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_notifications_last_sent",
        "notifications",
        ["template_kind", "convention_id", "recipient", "created_at"],
    )

    # SHORT LINKS
    op.create_table(
        "short_links",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("single_use", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # EVENTS (outbox)
    op.create_table(
        "events",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("event_type", sa.String(128), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_events_unpublished", "events", ["published_at", "created_at"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_events_unpublished", table_name="events")
    op.drop_table("events")
    op.drop_table("short_links")
    op.drop_index("idx_notifications_last_sent", table_name="notifications")
    op.drop_table("notifications")
    op.drop_table("assessments")
    op.drop_index("idx_conventions_status", table_name="conventions")
    op.drop_index("idx_conventions_agency_id", table_name="conventions")
    op.drop_table("conventions")
    op.drop_index("idx_users_agencies_agency_id", table_name="users__agencies")
    op.drop_table("users__agencies")
    op.drop_table("users")
    op.drop_table("agencies")
