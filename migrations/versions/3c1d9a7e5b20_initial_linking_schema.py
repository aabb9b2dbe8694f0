"""initial_linking_schema

Create the schema for cabinet account linking:
- Accounts (monetizable state, merge tombstones)
- Linked identities (the IdentityStore)
- Link codes (single-use merge offers)
- Unlink requests and the OTP confirm attempt log
- Identity unlink events (Telegram relink cooldown source)
- Manual merge tickets

Revision ID: 3c1d9a7e5b20
Revises:
Create Date: 2026-10-18 10:12:44.518203

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3c1d9a7e5b20"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        sa.UUID(),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        nullable=False,
        server_default=sa.text("NOW()"),
    )


def upgrade() -> None:
    """Upgrade schema."""
    # gen_random_uuid() lives in pgcrypto before PostgreSQL 13
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # ========================================================================
    # ACCOUNTS table
    # ========================================================================
    op.create_table(
        "accounts",
        _id_column(),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("primary_auth_provider", sa.String(20), nullable=True),
        sa.Column(
            "has_active_subscription",
            sa.Boolean(),
            nullable=False,
            server_default="false",
        ),
        sa.Column("balance_kopeks", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("referral_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("merged_into_id", sa.UUID(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.Column("deactivated_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["merged_into_id"], ["accounts.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("balance_kopeks >= 0", name="check_balance_non_negative"),
        sa.CheckConstraint("referral_count >= 0", name="check_referrals_non_negative"),
    )

    # ========================================================================
    # LINKED_IDENTITIES table
    # ========================================================================
    op.create_table(
        "linked_identities",
        _id_column(),
        sa.Column("account_id", sa.UUID(), nullable=False),
        sa.Column("provider", sa.String(20), nullable=False),
        sa.Column("provider_user_id", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column("linked_at", sa.TIMESTAMP(timezone=True), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("provider", "provider_user_id", name="uq_linked_identity"),
        sa.UniqueConstraint("account_id", "provider", name="uq_account_provider"),
    )
    op.create_index(
        "idx_linked_identities_account_id", "linked_identities", ["account_id"]
    )

    # ========================================================================
    # LINK_CODES table
    # ========================================================================
    op.create_table(
        "link_codes",
        _id_column(),
        sa.Column("code", sa.String(32), nullable=False),
        sa.Column("source_account_id", sa.UUID(), nullable=False),
        sa.Column(
            "source_identity_hints",
            postgresql.JSONB(),
            nullable=False,
            server_default="{}",
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("attempts_used", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("max_attempts", sa.Integer(), nullable=False),
        _timestamp("created_at"),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("consumed_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("consumed_by_account_id", sa.UUID(), nullable=True),
        sa.ForeignKeyConstraint(
            ["source_account_id"], ["accounts.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["consumed_by_account_id"], ["accounts.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('active', 'consumed', 'exhausted', 'revoked', 'manual_review')",
            name="check_link_code_status",
        ),
    )
    op.create_index(
        "uq_link_codes_active_code",
        "link_codes",
        ["code"],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
    )
    op.create_index(
        "idx_link_codes_code_created", "link_codes", ["code", "created_at"]
    )
    op.create_index(
        "idx_link_codes_source_account", "link_codes", ["source_account_id"]
    )

    # ========================================================================
    # UNLINK_REQUESTS table
    # ========================================================================
    op.create_table(
        "unlink_requests",
        _id_column(),
        sa.Column("token_hash", sa.String(64), nullable=False),
        sa.Column("account_id", sa.UUID(), nullable=False),
        sa.Column("provider", sa.String(20), nullable=False),
        sa.Column("otp_hash", sa.String(64), nullable=False),
        sa.Column("attempts_left", sa.Integer(), nullable=False),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("resend_available_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("delivered", sa.Boolean(), nullable=False, server_default="false"),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token_hash"),
        sa.UniqueConstraint(
            "account_id", "provider", name="uq_unlink_request_account_provider"
        ),
    )

    # ========================================================================
    # OTP_ATTEMPTS table
    # ========================================================================
    op.create_table(
        "otp_attempts",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("account_id", sa.UUID(), nullable=False),
        sa.Column("attempted_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_otp_attempts_account_time",
        "otp_attempts",
        ["account_id", "attempted_at"],
    )

    # ========================================================================
    # IDENTITY_UNLINK_EVENTS table
    # ========================================================================
    op.create_table(
        "identity_unlink_events",
        _id_column(),
        sa.Column("account_id", sa.UUID(), nullable=False),
        sa.Column("provider", sa.String(20), nullable=False),
        sa.Column("provider_user_id", sa.String(255), nullable=False),
        sa.Column("reason", sa.String(30), nullable=False),
        sa.Column("unlinked_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_unlink_events_lookup",
        "identity_unlink_events",
        ["account_id", "provider", "unlinked_at"],
    )

    # ========================================================================
    # MANUAL_MERGE_TICKETS table
    # ========================================================================
    op.create_table(
        "manual_merge_tickets",
        _id_column(),
        sa.Column("requester_account_id", sa.UUID(), nullable=False),
        sa.Column("source_account_id", sa.UUID(), nullable=False),
        sa.Column("link_code_id", sa.UUID(), nullable=False),
        sa.Column("conflict_reason", sa.String(30), nullable=False),
        sa.Column(
            "requester_identity_hints",
            postgresql.JSONB(),
            nullable=False,
            server_default="{}",
        ),
        sa.Column(
            "source_identity_hints",
            postgresql.JSONB(),
            nullable=False,
            server_default="{}",
        ),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("decision", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("primary_account_id", sa.UUID(), nullable=True),
        sa.Column("resolution_comment", sa.Text(), nullable=True),
        sa.Column("resolved_by_account_id", sa.UUID(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(
            ["requester_account_id"], ["accounts.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["source_account_id"], ["accounts.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["link_code_id"], ["link_codes.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "decision IN ('pending', 'approve', 'reject')",
            name="check_manual_merge_decision",
        ),
    )
    op.create_index(
        "idx_manual_merge_requester_created",
        "manual_merge_tickets",
        ["requester_account_id", "created_at"],
    )
    op.create_index(
        "idx_manual_merge_decision", "manual_merge_tickets", ["decision"]
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("manual_merge_tickets")
    op.drop_table("identity_unlink_events")
    op.drop_table("otp_attempts")
    op.drop_table("unlink_requests")
    op.drop_table("link_codes")
    op.drop_table("linked_identities")
    op.drop_table("accounts")
