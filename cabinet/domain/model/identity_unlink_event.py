"""Identity unlink history."""

from datetime import datetime

from cabinet.domain.model.common import DomainModel
from cabinet.domain.value import (
    AccountId,
    AuthProvider,
    IdentityUnlinkEventId,
    UnlinkEventReason,
)


class IdentityUnlinkEvent(DomainModel):
    """Record of an identity leaving an account.

    The Telegram relink cooldown is derived from the latest user-initiated
    Telegram event of the account.
    """

    id: IdentityUnlinkEventId
    account_id: AccountId
    provider: AuthProvider
    provider_user_id: str
    reason: UnlinkEventReason
    unlinked_at: datetime
