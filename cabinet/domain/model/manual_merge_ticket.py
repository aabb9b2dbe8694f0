"""Manual merge ticket entity."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from cabinet.domain.model.common import DomainModel, utc_now
from cabinet.domain.value import (
    AccountId,
    LinkCodeId,
    ManualMergeDecision,
    ManualMergeTicketId,
)


class ManualMergeTicket(DomainModel):
    """Human-adjudicated request to merge two conflicting accounts.

    Tickets are never deleted; the newest ticket of a requester supersedes
    older ones for display.
    """

    id: ManualMergeTicketId
    requester_account_id: AccountId
    source_account_id: AccountId
    link_code_id: LinkCodeId
    conflict_reason: str
    requester_identity_hints: dict[str, str] = Field(default_factory=dict)
    source_identity_hints: dict[str, str] = Field(default_factory=dict)
    comment: Optional[str] = None
    decision: ManualMergeDecision = ManualMergeDecision.PENDING
    primary_account_id: Optional[AccountId] = None
    resolution_comment: Optional[str] = None
    resolved_by_account_id: Optional[AccountId] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_pending(self) -> bool:
        return self.decision == ManualMergeDecision.PENDING
