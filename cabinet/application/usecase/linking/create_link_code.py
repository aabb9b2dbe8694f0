"""Create link code use case."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from cabinet.domain.service import AccountService, LinkCodeService
from cabinet.domain.value import AccountId
from cabinet.util.clock import Clock, seconds_until


class CreateLinkCodeRequest(BaseModel):
    """Create link code request."""

    account_id: str  # Authenticated account


class CreateLinkCodeResponse(BaseModel):
    """Create link code response."""

    code: str
    expires_at: datetime
    expires_in_seconds: int


class CreateLinkCodeUseCase:
    """Use case for issuing a link code on the account to be merged away."""

    def __init__(
        self,
        account_service: AccountService,
        link_code_service: LinkCodeService,
        clock: Clock,
    ) -> None:
        """Initialize create link code use case.

        Args:
            account_service: Account domain service
            link_code_service: Link code domain service
            clock: Wall clock
        """
        self.account_service = account_service
        self.link_code_service = link_code_service
        self.clock = clock

    async def execute(self, request: CreateLinkCodeRequest) -> CreateLinkCodeResponse:
        """Execute create link code flow.

        Args:
            request: Request with the authenticated account

        Returns:
            The new code and its expiry

        Raises:
            NotFoundError: If the account does not exist
            PolicyBlockError: If the account is inactive
        """
        account = await self.account_service.get_active(
            AccountId(UUID(request.account_id))
        )
        link_code = await self.link_code_service.create(account)
        return CreateLinkCodeResponse(
            code=link_code.code.root,
            expires_at=link_code.expires_at,
            expires_in_seconds=seconds_until(link_code.expires_at, self.clock.now()),
        )
