"""Submit manual merge use case."""

from uuid import UUID

from pydantic import BaseModel, Field

from cabinet.application.usecase.common import ManualMergeTicketCreated
from cabinet.domain.service import ManualMergeService
from cabinet.domain.value import AccountId


class SubmitManualMergeRequest(BaseModel):
    """Submit manual merge request."""

    code: str
    account_id: str  # Authenticated account (the requester)
    comment: str | None = Field(default=None, max_length=2000)


class SubmitManualMergeUseCase:
    """Use case for handing a conflicting merge over to support."""

    def __init__(self, manual_merge_service: ManualMergeService) -> None:
        self.manual_merge_service = manual_merge_service

    async def execute(
        self, request: SubmitManualMergeRequest
    ) -> ManualMergeTicketCreated:
        """Execute submit flow.

        Raises:
            DependencyUnavailableError: If support is disabled
            ValidationError: If the merge can be done automatically
            StateConflictError: If a ticket is already pending
            PolicyBlockError: If the pair was rejected before
        """
        ticket = await self.manual_merge_service.submit(
            request.code,
            AccountId(UUID(request.account_id)),
            comment=request.comment,
        )
        return ManualMergeTicketCreated(ticket_id=str(ticket.id))
