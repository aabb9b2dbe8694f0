"""Link Telegram identity use case."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from cabinet.domain.service import (
    AccountService,
    IdentityService,
    TelegramAuthService,
)
from cabinet.domain.value import AccountId, AuthProvider, TelegramLoginData


class LinkTelegramRequest(BaseModel):
    """Link Telegram identity request."""

    account_id: str
    login_data: TelegramLoginData  # Signed payload from the login widget


class LinkIdentityResponse(BaseModel):
    """The attached identity."""

    provider: AuthProvider
    provider_user_id_masked: str
    linked_at: datetime


class LinkTelegramUseCase:
    """Use case for attaching a Telegram identity via the login widget."""

    def __init__(
        self,
        account_service: AccountService,
        identity_service: IdentityService,
        telegram_auth_service: TelegramAuthService,
    ) -> None:
        """Initialize link Telegram use case.

        Args:
            account_service: Account domain service
            identity_service: Identity domain service
            telegram_auth_service: Login widget signature verification
        """
        self.account_service = account_service
        self.identity_service = identity_service
        self.telegram_auth_service = telegram_auth_service

    async def execute(self, request: LinkTelegramRequest) -> LinkIdentityResponse:
        """Execute link flow.

        Raises:
            ValidationError: Invalid or stale widget signature
            StateConflictError: The Telegram account belongs to another account
            PolicyBlockError: Telegram relink refused by policy
        """
        info = self.telegram_auth_service.verify(request.login_data)
        account = await self.account_service.get_active(
            AccountId(UUID(request.account_id))
        )
        identity = await self.identity_service.attach(
            account.id,
            AuthProvider.TELEGRAM,
            info.provider_user_id,
            display_name=info.display_name,
        )
        return LinkIdentityResponse(
            provider=identity.provider,
            provider_user_id_masked=identity.masked_provider_user_id,
            linked_at=identity.linked_at,
        )
