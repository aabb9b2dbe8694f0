"""Models and helpers shared by several use cases."""

from datetime import datetime

from pydantic import BaseModel

from cabinet.domain.error import ErrorCode, PolicyBlockError
from cabinet.domain.model import Account, ManualMergeTicket
from cabinet.domain.value import (
    AuthProvider,
    BlockReason,
    ManualMergeDecision,
    ManualMergeStateFilter,
)


class AccountInfo(BaseModel):
    """Account summary returned after a session is (re)issued."""

    id: str
    is_active: bool
    primary_auth_provider: AuthProvider | None
    has_active_subscription: bool
    balance_kopeks: int
    referral_count: int

    @classmethod
    def from_account(cls, account: Account) -> "AccountInfo":
        return cls(
            id=str(account.id),
            is_active=account.is_active,
            primary_auth_provider=account.primary_auth_provider,
            has_active_subscription=account.has_active_subscription,
            balance_kopeks=account.balance_kopeks,
            referral_count=account.referral_count,
        )


TICKET_STATUS = {
    ManualMergeDecision.PENDING: ManualMergeStateFilter.PENDING.value,
    ManualMergeDecision.APPROVE: ManualMergeStateFilter.APPROVED.value,
    ManualMergeDecision.REJECT: ManualMergeStateFilter.REJECTED.value,
}


def ticket_decision(ticket: ManualMergeTicket) -> ManualMergeDecision | None:
    """Adjudication of a ticket, ``None`` while it is still pending."""
    return None if ticket.is_pending else ticket.decision


class ManualMergeTicketCreated(BaseModel):
    """Reference to a freshly opened ticket."""

    ticket_id: str


class ManualMergeTicketStatus(BaseModel):
    """Requester's view of a ticket."""

    ticket_id: str
    status: str
    decision: ManualMergeDecision | None
    resolution_comment: str | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_ticket(cls, ticket: ManualMergeTicket) -> "ManualMergeTicketStatus":
        return cls(
            ticket_id=str(ticket.id),
            status=TICKET_STATUS[ticket.decision],
            decision=ticket_decision(ticket),
            resolution_comment=ticket.resolution_comment,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
        )


class AdminManualMergeItem(BaseModel):
    """Ticket as listed in the admin queue.

    ``current_user_id`` is the account that owns the request (the
    requester); ``primary_user_id`` is the survivor chosen on approval.
    """

    ticket_id: str
    status: str
    decision: ManualMergeDecision | None
    created_at: datetime
    updated_at: datetime
    requester_user_id: str
    source_user_id: str | None
    current_user_id: str | None
    conflict_reason: str
    requester_identity_hints: dict[str, str]
    source_identity_hints: dict[str, str]
    user_comment: str | None
    primary_user_id: str | None
    resolution_comment: str | None

    @classmethod
    def from_ticket(cls, ticket: ManualMergeTicket) -> "AdminManualMergeItem":
        return cls(
            ticket_id=str(ticket.id),
            status=TICKET_STATUS[ticket.decision],
            decision=ticket_decision(ticket),
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
            requester_user_id=str(ticket.requester_account_id),
            source_user_id=str(ticket.source_account_id),
            current_user_id=str(ticket.requester_account_id),
            conflict_reason=ticket.conflict_reason,
            requester_identity_hints=ticket.requester_identity_hints,
            source_identity_hints=ticket.source_identity_hints,
            user_comment=ticket.comment,
            primary_user_id=(
                str(ticket.primary_account_id) if ticket.primary_account_id else None
            ),
            resolution_comment=ticket.resolution_comment,
        )


def parse_provider(value: str) -> AuthProvider:
    """Parse a provider name taken from a URL or request body.

    Raises:
        PolicyBlockError: If the name is not a known provider
    """
    try:
        return AuthProvider(value.strip().lower())
    except ValueError:
        raise PolicyBlockError(
            ErrorCode.PROVIDER_NOT_SUPPORTED,
            reason=BlockReason.PROVIDER_NOT_SUPPORTED.value,
        )


def session_provider(
    account: Account, auth_provider: AuthProvider | None
) -> AuthProvider | None:
    """Provider of the caller's session, falling back to the account's primary."""
    return auth_provider or account.primary_auth_provider
