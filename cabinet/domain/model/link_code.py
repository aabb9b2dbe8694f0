"""Link code entity."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from cabinet.domain.model.common import DomainModel, utc_now
from cabinet.domain.value import AccountId, LinkCodeId, LinkCodeStatus, LinkCodeValue


class LinkCode(DomainModel):
    """Single-use offer to merge the source account into whoever redeems it.

    Business rules:
    - One active code per source account
    - Expires ``expires_at``; evaluated lazily on access
    - Every preview/confirm consumes one attempt; exceeding ``max_attempts``
      exhausts the code
    """

    id: LinkCodeId
    code: LinkCodeValue
    source_account_id: AccountId
    source_identity_hints: dict[str, str] = Field(default_factory=dict)
    status: LinkCodeStatus = LinkCodeStatus.ACTIVE
    attempts_used: int = Field(default=0, ge=0)
    max_attempts: int = Field(ge=1)
    created_at: datetime = Field(default_factory=utc_now)
    expires_at: datetime
    consumed_at: Optional[datetime] = None
    consumed_by_account_id: Optional[AccountId] = None

    def is_expired(self, now: datetime) -> bool:
        """Whether the code's TTL has elapsed."""
        return now >= self.expires_at
