"""Link OAuth identity use case."""

from uuid import UUID

import logfire
from pydantic import BaseModel

from cabinet.application.usecase.common import parse_provider
from cabinet.domain.service import AccountService, AuthService, IdentityService
from cabinet.domain.value import AccountId

from .link_telegram import LinkIdentityResponse


class LinkOAuthIdentityRequest(BaseModel):
    """Link OAuth identity request."""

    account_id: str
    provider: str
    code: str  # Authorization code from the provider callback
    state: str


class LinkOAuthIdentityUseCase:
    """Use case for attaching a Yandex or VK identity."""

    def __init__(
        self,
        account_service: AccountService,
        auth_service: AuthService,
        identity_service: IdentityService,
    ) -> None:
        """Initialize link OAuth identity use case.

        Args:
            account_service: Account domain service
            auth_service: OAuth domain service
            identity_service: Identity domain service
        """
        self.account_service = account_service
        self.auth_service = auth_service
        self.identity_service = identity_service

    async def execute(self, request: LinkOAuthIdentityRequest) -> LinkIdentityResponse:
        """Execute link flow.

        Steps:
        1. Complete the authorization code exchange with the provider
        2. Attach the returned identity to the caller's account

        Raises:
            PolicyBlockError: Provider unsupported or already linked
            DependencyUnavailableError: Provider exchange failed
            StateConflictError: Identity belongs to another account
        """
        provider = parse_provider(request.provider)
        account = await self.account_service.get_active(
            AccountId(UUID(request.account_id))
        )
        info = await self.auth_service.complete(provider, request.code, request.state)
        logfire.info(
            "OAuth completed for link",
            account_id=str(account.id),
            provider=provider.value,
        )
        identity = await self.identity_service.attach(
            account.id,
            provider,
            info.provider_user_id,
            display_name=info.display_name or info.handle,
        )
        return LinkIdentityResponse(
            provider=identity.provider,
            provider_user_id_masked=identity.masked_provider_user_id,
            linked_at=identity.linked_at,
        )
