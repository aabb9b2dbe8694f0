"""Account aggregate root.

An account holds one or more external identities and the monetizable state
(subscription, balance, referrals) that makes merging two accounts risky.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from cabinet.domain.model.common import DomainModel, utc_now
from cabinet.domain.value import AccountId, AuthProvider


class Account(DomainModel):
    """Customer cabinet account.

    Identities live in the IdentityStore (``LinkedIdentityRepository``), not on
    the aggregate, so that merges can move them in a single statement.
    """

    id: AccountId
    is_active: bool = True
    primary_auth_provider: Optional[AuthProvider] = None
    has_active_subscription: bool = False
    balance_kopeks: int = Field(default=0, ge=0)
    referral_count: int = Field(default=0, ge=0)
    merged_into_id: Optional[AccountId] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    deactivated_at: Optional[datetime] = None

    @property
    def has_monetizable_state(self) -> bool:
        """Whether the account holds anything a merge could destroy."""
        return (
            self.has_active_subscription
            or self.balance_kopeks > 0
            or self.referral_count > 0
        )
