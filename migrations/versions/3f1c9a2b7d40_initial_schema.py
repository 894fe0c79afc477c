"""initial_schema

Create the identity and session schema:
- Users (password and/or OAuth sign-in, lockout counters)
- User OAuth links (Google, Facebook, GitHub; one link per provider)
- Refresh tokens (bounded per-user ledger, oldest first by id)

Revision ID: 3f1c9a2b7d40
Revises:
Create Date: 2026-10-19 10:12:04.512381

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3f1c9a2b7d40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # ==========================================================================
    # USERS
    # ==========================================================================
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("avatar", sa.Text(), nullable=True),
        sa.Column(
            "is_email_verified", sa.Boolean(), nullable=False, server_default="false"
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column(
            "failed_login_count", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("locked_until", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("last_login_at", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("last_login_ip", sa.String(45), nullable=True),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            postgresql.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.CheckConstraint("failed_login_count >= 0", name="ck_users_failed_login_count"),
    )

    # Emails are unique case-insensitively
    op.execute("CREATE UNIQUE INDEX uq_users_email_lower ON users (LOWER(email))")

    # ==========================================================================
    # USER OAUTH LINKS
    # ==========================================================================
    op.create_table(
        "user_oauth_links",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("provider", sa.String(20), nullable=False),
        sa.Column("provider_id", sa.String(255), nullable=False),
        sa.Column(
            "connected_at",
            postgresql.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.UniqueConstraint(
            "provider", "provider_id", name="uq_oauth_provider_identity"
        ),
        sa.UniqueConstraint("user_id", "provider", name="uq_oauth_user_provider"),
        sa.CheckConstraint(
            "provider IN ('google', 'facebook', 'github')",
            name="ck_oauth_provider",
        ),
    )
    op.create_index(
        "idx_user_oauth_links_user_id", "user_oauth_links", ["user_id"]
    )

    # ==========================================================================
    # REFRESH TOKENS
    # ==========================================================================
    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("token", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
    )
    op.create_index("idx_refresh_tokens_user_id", "refresh_tokens", ["user_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_refresh_tokens_user_id", table_name="refresh_tokens")
    op.drop_table("refresh_tokens")
    op.drop_index("idx_user_oauth_links_user_id", table_name="user_oauth_links")
    op.drop_table("user_oauth_links")
    op.execute("DROP INDEX IF EXISTS uq_users_email_lower")
    op.drop_table("users")
