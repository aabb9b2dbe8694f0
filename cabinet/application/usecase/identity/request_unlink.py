"""Request unlink use case."""

from uuid import UUID

from pydantic import BaseModel

from cabinet.application.usecase.common import parse_provider, session_provider
from cabinet.domain.service import AccountService, UnlinkService
from cabinet.domain.value import AccountId, AuthProvider
from cabinet.util.clock import Clock, seconds_until


class RequestUnlinkRequest(BaseModel):
    """Request unlink request."""

    account_id: str
    provider: str  # Raw path segment; unknown names are a policy block
    auth_provider: AuthProvider | None = None


class RequestUnlinkResponse(BaseModel):
    """Opaque token to send back together with the delivered OTP."""

    provider: AuthProvider
    request_token: str
    expires_in_seconds: int
    resend_available_in_seconds: int


class RequestUnlinkUseCase:
    """Use case for starting the OTP-confirmed unlink of an identity."""

    def __init__(
        self,
        account_service: AccountService,
        unlink_service: UnlinkService,
        clock: Clock,
    ) -> None:
        """Initialize request unlink use case.

        Args:
            account_service: Account domain service
            unlink_service: Unlink domain service
            clock: Wall clock
        """
        self.account_service = account_service
        self.unlink_service = unlink_service
        self.clock = clock

    async def execute(self, request: RequestUnlinkRequest) -> RequestUnlinkResponse:
        """Execute request flow.

        Raises:
            PolicyBlockError: Unknown provider or the identity is not unlinkable
            RateLimitError: A code was sent too recently
            DependencyUnavailableError: The OTP could not be delivered
        """
        provider = parse_provider(request.provider)
        account = await self.account_service.get_active(
            AccountId(UUID(request.account_id))
        )
        issued = await self.unlink_service.request_unlink(
            account, provider, session_provider(account, request.auth_provider)
        )
        return RequestUnlinkResponse(
            provider=provider,
            request_token=issued.request_token,
            expires_in_seconds=issued.expires_in_seconds,
            resend_available_in_seconds=seconds_until(
                issued.request.resend_available_at, self.clock.now()
            ),
        )
