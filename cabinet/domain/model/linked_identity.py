"""Linked identity entity.

Binds an external provider account (Telegram, email, OAuth) to a cabinet
account.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from cabinet.domain.model.common import DomainModel, utc_now
from cabinet.domain.value import AccountId, AuthProvider, LinkedIdentityId
from cabinet.util.masking import mask_provider_user_id


class LinkedIdentity(DomainModel):
    """External identity attached to an account.

    At most one identity per provider per account, and one binding per
    (provider, provider_user_id) across all accounts.
    """

    id: LinkedIdentityId
    account_id: AccountId
    provider: AuthProvider
    provider_user_id: str  # Telegram user id, email address, OAuth subject
    display_name: Optional[str] = None
    linked_at: datetime  # When it was attached to the current account
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def masked_provider_user_id(self) -> str:
        """Provider user id safe to show to clients."""
        return mask_provider_user_id(self.provider.value, self.provider_user_id)
