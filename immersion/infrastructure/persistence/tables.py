"""SQLAlchemy table definitions - dialect-agnostic (works with SQLite and PostgreSQL)."""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.types import JSON

metadata = MetaData()

# ============================================================================
# AGENCIES TABLE
# ============================================================================
agencies_table = Table(
    "agencies",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("kind", String(32), nullable=False),
    Column("department", String(8), nullable=False, server_default=""),
    Column("status", String(32), nullable=False),
    # One-hop reference to the agency validating on behalf of this one
    Column("refers_to_agency_id", String, ForeignKey("agencies.id"), nullable=True),
)


# ============================================================================
# USERS TABLES
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", String, primary_key=True),
    Column("email", String, nullable=False, unique=True),
    Column("first_name", String, nullable=False, server_default=""),
    Column("last_name", String, nullable=False, server_default=""),
    Column("is_backoffice_admin", Boolean, nullable=False, server_default="0"),
)

users_agencies_table = Table(
    "users__agencies",
    metadata,
    Column("user_id", String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("agency_id", String, ForeignKey("agencies.id", ondelete="CASCADE"), primary_key=True),
    Column("roles", JSON, nullable=False),  # list of AgencyRole values
    Column("is_notified_by_email", Boolean, nullable=False, server_default="0"),
)

Index("idx_users_agencies_agency_id", users_agencies_table.c.agency_id)


# ============================================================================
# CONVENTIONS TABLE
# ============================================================================
conventions_table = Table(
    "conventions",
    metadata,
    Column("id", String, primary_key=True),
    Column("status", String(32), nullable=False),  # ConventionStatus as string
    Column("status_justification", Text, nullable=True),
    Column("agency_id", String, ForeignKey("agencies.id"), nullable=False),
    Column("signatories", JSON, nullable=False),
    Column("establishment_tutor", JSON, nullable=False),
    Column("validators", JSON, nullable=True),
    Column("date_submission", DateTime(timezone=True), nullable=False),
    Column("date_start", Date, nullable=False),
    Column("date_end", Date, nullable=False),
    Column("date_validation", DateTime(timezone=True), nullable=True),
    Column("date_approval", DateTime(timezone=True), nullable=True),
    Column("internship_kind", String(32), nullable=False),
    Column("siret", String(14), nullable=False, server_default=""),
    Column("business_name", String, nullable=False, server_default=""),
    Column("content", JSON, nullable=False),  # address, appellation, objective, schedule
    # Optimistic concurrency token: every write checks it is unchanged
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

Index("idx_conventions_agency_id", conventions_table.c.agency_id)
Index("idx_conventions_status", conventions_table.c.status)


# ============================================================================
# ASSESSMENTS TABLE
# ============================================================================
assessments_table = Table(
    "assessments",
    metadata,
    Column("convention_id", String, ForeignKey("conventions.id"), primary_key=True),
    Column("status", String(32), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
)


# ============================================================================
# NOTIFICATIONS TABLE
# ============================================================================
notifications_table = Table(
    "notifications",
    metadata,
    Column("id", String, primary_key=True),
    Column("kind", String(8), nullable=False),  # email | sms
    Column("template_kind", String(64), nullable=False),
    Column("recipient", String, nullable=False),
    Column("params", JSON, nullable=False),
    Column("convention_id", String, nullable=True),
    Column("agency_id", String, nullable=True),
    Column("establishment_siret", String(14), nullable=True),
    Column("user_id", String, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

Index(
    "idx_notifications_last_sent",
    notifications_table.c.template_kind,
    notifications_table.c.convention_id,
    notifications_table.c.recipient,
    notifications_table.c.created_at,
)


# ============================================================================
# SHORT LINKS TABLE
# ============================================================================
short_links_table = Table(
    "short_links",
    metadata,
    Column("id", String, primary_key=True),
    Column("url", Text, nullable=False),
    Column("single_use", Boolean, nullable=False, server_default="0"),
    Column("used_at", DateTime(timezone=True), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
)


# ============================================================================
# EVENTS TABLE (outbox)
# ============================================================================
events_table = Table(
    "events",
    metadata,
    Column("id", String, primary_key=True),
    Column("event_type", String(128), nullable=False),
    Column("payload", JSON, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("published_at", DateTime(timezone=True), nullable=True),
    Column("attempts", Integer, nullable=False, server_default="0"),
    Column("last_error", Text, nullable=True),
)

Index("idx_events_unpublished", events_table.c.published_at, events_table.c.created_at)
