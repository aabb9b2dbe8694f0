"""SQLAlchemy table definitions for cabinet account linking.

They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# ACCOUNTS TABLE
# ============================================================================
accounts_table = Table(
    "accounts",
    metadata,
    Column("id", UUID, primary_key=True, server_default=text("gen_random_uuid()")),
    Column("is_active", Boolean, nullable=False, server_default="true"),
    Column("primary_auth_provider", String(20), nullable=True),
    Column("has_active_subscription", Boolean, nullable=False, server_default="false"),
    Column("balance_kopeks", BigInteger, nullable=False, server_default="0"),
    Column("referral_count", Integer, nullable=False, server_default="0"),
    Column(
        "merged_into_id",
        UUID,
        ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("deactivated_at", TIMESTAMP(timezone=True), nullable=True),
    CheckConstraint("balance_kopeks >= 0", name="check_balance_non_negative"),
    CheckConstraint("referral_count >= 0", name="check_referrals_non_negative"),
)

# ============================================================================
# LINKED IDENTITIES TABLE (IdentityStore)
# ============================================================================
linked_identities_table = Table(
    "linked_identities",
    metadata,
    Column("id", UUID, primary_key=True, server_default=text("gen_random_uuid()")),
    Column(
        "account_id",
        UUID,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("provider", String(20), nullable=False),
    Column("provider_user_id", String(255), nullable=False),
    Column("display_name", String(255), nullable=True),
    Column("linked_at", TIMESTAMP(timezone=True), nullable=False),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    # One binding per external identity, one identity per provider per account
    UniqueConstraint("provider", "provider_user_id", name="uq_linked_identity"),
    UniqueConstraint("account_id", "provider", name="uq_account_provider"),
)

Index("idx_linked_identities_account_id", linked_identities_table.c.account_id)

# ============================================================================
# LINK CODES TABLE
# ============================================================================
link_codes_table = Table(
    "link_codes",
    metadata,
    Column("id", UUID, primary_key=True, server_default=text("gen_random_uuid()")),
    Column("code", String(32), nullable=False),
    Column(
        "source_account_id",
        UUID,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("source_identity_hints", JSONB, nullable=False, server_default="{}"),
    Column("status", String(20), nullable=False, server_default="active"),
    Column("attempts_used", Integer, nullable=False, server_default="0"),
    Column("max_attempts", Integer, nullable=False),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("expires_at", TIMESTAMP(timezone=True), nullable=False),
    Column("consumed_at", TIMESTAMP(timezone=True), nullable=True),
    Column(
        "consumed_by_account_id",
        UUID,
        ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
    ),
    CheckConstraint(
        "status IN ('active', 'consumed', 'exhausted', 'revoked', 'manual_review')",
        name="check_link_code_status",
    ),
)

# Active codes are unique; historical rows may repeat a value
Index(
    "uq_link_codes_active_code",
    link_codes_table.c.code,
    unique=True,
    postgresql_where=link_codes_table.c.status == "active",
)
Index(
    "idx_link_codes_code_created",
    link_codes_table.c.code,
    link_codes_table.c.created_at,
)
Index("idx_link_codes_source_account", link_codes_table.c.source_account_id)

# ============================================================================
# UNLINK REQUESTS TABLE
# ============================================================================
unlink_requests_table = Table(
    "unlink_requests",
    metadata,
    Column("id", UUID, primary_key=True, server_default=text("gen_random_uuid()")),
    Column("token_hash", String(64), nullable=False, unique=True),
    Column(
        "account_id",
        UUID,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("provider", String(20), nullable=False),
    Column("otp_hash", String(64), nullable=False),
    Column("attempts_left", Integer, nullable=False),
    Column("expires_at", TIMESTAMP(timezone=True), nullable=False),
    Column("resend_available_at", TIMESTAMP(timezone=True), nullable=False),
    Column("delivered", Boolean, nullable=False, server_default="false"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint(
        "account_id", "provider", name="uq_unlink_request_account_provider"
    ),
)

# ============================================================================
# OTP ATTEMPTS TABLE (per-account confirm rate limit)
# ============================================================================
otp_attempts_table = Table(
    "otp_attempts",
    metadata,
    Column("id", BigInteger, primary_key=True, autoincrement=True),
    Column(
        "account_id",
        UUID,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("attempted_at", TIMESTAMP(timezone=True), nullable=False),
)

Index(
    "idx_otp_attempts_account_time",
    otp_attempts_table.c.account_id,
    otp_attempts_table.c.attempted_at,
)

# ============================================================================
# IDENTITY UNLINK EVENTS TABLE
# ============================================================================
identity_unlink_events_table = Table(
    "identity_unlink_events",
    metadata,
    Column("id", UUID, primary_key=True, server_default=text("gen_random_uuid()")),
    Column(
        "account_id",
        UUID,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("provider", String(20), nullable=False),
    Column("provider_user_id", String(255), nullable=False),
    Column("reason", String(30), nullable=False),
    Column("unlinked_at", TIMESTAMP(timezone=True), nullable=False),
)

Index(
    "idx_unlink_events_lookup",
    identity_unlink_events_table.c.account_id,
    identity_unlink_events_table.c.provider,
    identity_unlink_events_table.c.unlinked_at,
)

# ============================================================================
# MANUAL MERGE TICKETS TABLE
# ============================================================================
manual_merge_tickets_table = Table(
    "manual_merge_tickets",
    metadata,
    Column("id", UUID, primary_key=True, server_default=text("gen_random_uuid()")),
    Column(
        "requester_account_id",
        UUID,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "source_account_id",
        UUID,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("link_code_id", UUID, ForeignKey("link_codes.id"), nullable=False),
    Column("conflict_reason", String(30), nullable=False),
    Column("requester_identity_hints", JSONB, nullable=False, server_default="{}"),
    Column("source_identity_hints", JSONB, nullable=False, server_default="{}"),
    Column("comment", Text, nullable=True),
    Column("decision", String(20), nullable=False, server_default="pending"),
    Column("primary_account_id", UUID, nullable=True),
    Column("resolution_comment", Text, nullable=True),
    Column("resolved_by_account_id", UUID, nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    CheckConstraint(
        "decision IN ('pending', 'approve', 'reject')",
        name="check_manual_merge_decision",
    ),
)

Index(
    "idx_manual_merge_requester_created",
    manual_merge_tickets_table.c.requester_account_id,
    manual_merge_tickets_table.c.created_at,
)
Index("idx_manual_merge_decision", manual_merge_tickets_table.c.decision)
