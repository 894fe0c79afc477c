"""SQLAlchemy table definitions.

These table definitions match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

metadata = MetaData()

# ============================================================================
# USERS TABLE
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", UUID(as_uuid=True), primary_key=True),
    Column("name", String(50), nullable=False),
    Column("email", String(255), nullable=False),  # Stored case-folded
    Column("password_hash", String(255), nullable=True),  # NULL for OAuth-only users
    Column("date_of_birth", Date, nullable=True),
    Column("avatar", Text, nullable=True),
    Column("is_email_verified", Boolean, nullable=False, server_default="false"),
    Column("is_active", Boolean, nullable=False, server_default="true"),
    Column("failed_login_count", Integer, nullable=False, server_default="0"),
    Column("locked_until", TIMESTAMP(timezone=True), nullable=True),
    Column("last_login_at", TIMESTAMP(timezone=True), nullable=True),
    Column("last_login_ip", String(45), nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

Index("uq_users_email_lower", func.lower(users_table.c.email), unique=True)

# ============================================================================
# USER OAUTH LINKS TABLE (at most one link per provider per user)
# ============================================================================
user_oauth_links_table = Table(
    "user_oauth_links",
    metadata,
    Column("id", BigInteger, primary_key=True, autoincrement=True),
    Column(
        "user_id",
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("provider", String(20), nullable=False),  # 'google', 'facebook', 'github'
    Column("provider_id", String(255), nullable=False),
    Column(
        "connected_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint("provider", "provider_id", name="uq_oauth_provider_identity"),
    UniqueConstraint("user_id", "provider", name="uq_oauth_user_provider"),
)

Index("idx_user_oauth_links_user_id", user_oauth_links_table.c.user_id)

# ============================================================================
# REFRESH TOKENS TABLE (ordered by id; oldest evicted first)
# ============================================================================
refresh_tokens_table = Table(
    "refresh_tokens",
    metadata,
    Column("id", BigInteger, primary_key=True, autoincrement=True),
    Column(
        "user_id",
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("token", Text, nullable=False),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

Index("idx_refresh_tokens_user_id", refresh_tokens_table.c.user_id)
