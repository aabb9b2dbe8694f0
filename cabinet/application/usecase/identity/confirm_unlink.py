"""Confirm unlink use case."""

from uuid import UUID

from pydantic import BaseModel

from cabinet.application.usecase.common import parse_provider, session_provider
from cabinet.domain.service import AccountService, UnlinkService
from cabinet.domain.value import AccountId, AuthProvider


class ConfirmUnlinkRequest(BaseModel):
    """Confirm unlink request."""

    account_id: str
    provider: str
    request_token: str
    otp_code: str
    auth_provider: AuthProvider | None = None


class ConfirmUnlinkResponse(BaseModel):
    """Confirm unlink response."""

    success: bool
    provider: AuthProvider


class ConfirmUnlinkUseCase:
    """Use case for finishing an unlink with the delivered OTP."""

    def __init__(
        self, account_service: AccountService, unlink_service: UnlinkService
    ) -> None:
        self.account_service = account_service
        self.unlink_service = unlink_service

    async def execute(self, request: ConfirmUnlinkRequest) -> ConfirmUnlinkResponse:
        """Execute confirm flow.

        Raises:
            StateConflictError: Unknown or expired request
            ValidationError: Request mismatch or wrong OTP
            RateLimitError: OTP attempts exhausted or account rate limited
            PolicyBlockError: The identity became unlinkable meanwhile
        """
        provider = parse_provider(request.provider)
        account = await self.account_service.get_active(
            AccountId(UUID(request.account_id))
        )
        identity = await self.unlink_service.confirm_unlink(
            account,
            provider,
            request.request_token,
            request.otp_code,
            session_provider(account, request.auth_provider),
        )
        return ConfirmUnlinkResponse(success=True, provider=identity.provider)
