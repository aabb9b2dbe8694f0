"""List linked identities use case."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from cabinet.application.usecase.common import session_provider
from cabinet.domain.service import AccountService, IdentityService
from cabinet.domain.value import AccountId, AuthProvider, Blocked
from cabinet.util.clock import Clock, seconds_until


class ListLinkedIdentitiesRequest(BaseModel):
    """List linked identities request."""

    account_id: str
    auth_provider: AuthProvider | None = None  # Provider of the caller's session


class LinkedIdentityInfo(BaseModel):
    """One identity with its unlink availability."""

    provider: AuthProvider
    provider_user_id_masked: str
    linked_at: datetime
    can_unlink: bool
    blocked_reason: str | None = None
    blocked_until: datetime | None = None
    retry_after_seconds: int | None = None


class TelegramRelinkInfo(BaseModel):
    """Whether a new Telegram identity can be attached."""

    can_start_relink: bool
    requires_unlink_first: bool
    cooldown_until: datetime | None = None
    retry_after_seconds: int | None = None


class ListLinkedIdentitiesResponse(BaseModel):
    """Identities of the account and the Telegram relink state."""

    identities: list[LinkedIdentityInfo]
    telegram_relink: TelegramRelinkInfo


class ListLinkedIdentitiesUseCase:
    """Use case for the identities panel of the cabinet."""

    def __init__(
        self,
        account_service: AccountService,
        identity_service: IdentityService,
        clock: Clock,
    ) -> None:
        """Initialize list linked identities use case.

        Args:
            account_service: Account domain service
            identity_service: Identity domain service
            clock: Wall clock
        """
        self.account_service = account_service
        self.identity_service = identity_service
        self.clock = clock

    async def execute(
        self, request: ListLinkedIdentitiesRequest
    ) -> ListLinkedIdentitiesResponse:
        """Execute list flow.

        Raises:
            NotFoundError: If the account does not exist
            PolicyBlockError: If the account is inactive
        """
        account = await self.account_service.get_active(
            AccountId(UUID(request.account_id))
        )
        current = session_provider(account, request.auth_provider)
        identities = await self.identity_service.list_identities(account.id)
        now = self.clock.now()

        items = []
        for identity in identities:
            availability = self.identity_service.availability_for(
                identities, identity.provider, current
            )
            info = LinkedIdentityInfo(
                provider=identity.provider,
                provider_user_id_masked=identity.masked_provider_user_id,
                linked_at=identity.linked_at,
                can_unlink=not isinstance(availability, Blocked),
            )
            if isinstance(availability, Blocked):
                info.blocked_reason = availability.reason.value
                if availability.until is not None:
                    info.blocked_until = availability.until
                    info.retry_after_seconds = seconds_until(availability.until, now)
            items.append(info)

        relink = await self.identity_service.telegram_relink_status(account.id)
        return ListLinkedIdentitiesResponse(
            identities=items,
            telegram_relink=TelegramRelinkInfo(
                can_start_relink=relink.can_start_relink,
                requires_unlink_first=relink.requires_unlink_first,
                cooldown_until=relink.cooldown_until,
                retry_after_seconds=relink.retry_after_seconds,
            ),
        )
