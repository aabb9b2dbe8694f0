"""Unlink request entity."""

from datetime import datetime

from pydantic import Field

from cabinet.domain.model.common import DomainModel, utc_now
from cabinet.domain.value import AccountId, AuthProvider, UnlinkRequestId


class UnlinkRequest(DomainModel):
    """Pending OTP-confirmed detachment of an identity.

    Only hashes of the request token and OTP are stored. One live request per
    (account, provider); issuing a new one replaces it.
    """

    id: UnlinkRequestId
    token_hash: str
    account_id: AccountId
    provider: AuthProvider
    otp_hash: str
    attempts_left: int = Field(ge=0)
    expires_at: datetime
    resend_available_at: datetime
    delivered: bool = False
    created_at: datetime = Field(default_factory=utc_now)

    def is_expired(self, now: datetime) -> bool:
        """Whether the request's TTL has elapsed."""
        return now >= self.expires_at
