"""Get latest manual merge use case."""

from uuid import UUID

from pydantic import BaseModel

from cabinet.application.usecase.common import ManualMergeTicketStatus
from cabinet.domain.service import ManualMergeService
from cabinet.domain.value import AccountId


class GetLatestManualMergeRequest(BaseModel):
    """Get latest manual merge request."""

    account_id: str


class GetLatestManualMergeUseCase:
    """Use case for showing the state of the caller's newest ticket."""

    def __init__(self, manual_merge_service: ManualMergeService) -> None:
        self.manual_merge_service = manual_merge_service

    async def execute(
        self, request: GetLatestManualMergeRequest
    ) -> ManualMergeTicketStatus | None:
        """Newest ticket of the requester, or ``None`` if they never opened one."""
        ticket = await self.manual_merge_service.get_latest(
            AccountId(UUID(request.account_id))
        )
        if ticket is None:
            return None
        return ManualMergeTicketStatus.from_ticket(ticket)
