"""Resolve manual merge use case."""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from cabinet.application.usecase.common import AdminManualMergeItem
from cabinet.config import AuthSettings
from cabinet.domain.service import ManualMergeService
from cabinet.domain.value import AccountId, ManualMergeDecision, ManualMergeTicketId

from .admin import ensure_admin


class ResolveManualMergeRequest(BaseModel):
    """Resolve manual merge request."""

    admin_id: str
    ticket_id: UUID
    action: Literal["approve", "reject"]
    primary_user_id: UUID | None = None  # Required to approve
    comment: str | None = Field(default=None, max_length=2000)


class ResolveManualMergeUseCase:
    """Use case for adjudicating a pending ticket."""

    def __init__(
        self, manual_merge_service: ManualMergeService, auth_settings: AuthSettings
    ) -> None:
        """Initialize resolve manual merge use case.

        Args:
            manual_merge_service: Manual merge domain service
            auth_settings: Authentication settings (admin accounts)
        """
        self.manual_merge_service = manual_merge_service
        self.auth_settings = auth_settings

    async def execute(
        self, request: ResolveManualMergeRequest
    ) -> AdminManualMergeItem:
        """Execute resolve flow.

        Approving merges the other account of the pair into
        ``primary_user_id``.

        Raises:
            NotAuthorizedError: If the caller is not an admin
            NotFoundError: If the ticket does not exist
            StateConflictError: If the ticket is already resolved
            ValidationError: If the primary account is not part of the pair
        """
        ensure_admin(request.admin_id, self.auth_settings, "resolve manual merges")
        ticket = await self.manual_merge_service.resolve(
            ManualMergeTicketId(request.ticket_id),
            AccountId(UUID(request.admin_id)),
            ManualMergeDecision(request.action),
            primary_account_id=(
                AccountId(request.primary_user_id) if request.primary_user_id else None
            ),
            comment=request.comment,
        )
        return AdminManualMergeItem.from_ticket(ticket)
