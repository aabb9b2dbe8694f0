"""List manual merges use case."""

import math

from pydantic import BaseModel, Field

from cabinet.application.usecase.common import AdminManualMergeItem
from cabinet.config import AuthSettings
from cabinet.domain.service import ManualMergeService
from cabinet.domain.value import ManualMergeStateFilter

from .admin import ensure_admin


class ListManualMergesRequest(BaseModel):
    """List manual merges request."""

    admin_id: str
    state: ManualMergeStateFilter = ManualMergeStateFilter.PENDING
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=20, ge=1, le=100)


class ListManualMergesResponse(BaseModel):
    """Page of tickets."""

    items: list[AdminManualMergeItem]
    total: int
    page: int
    per_page: int
    pages: int


class ListManualMergesUseCase:
    """Use case for the admin ticket queue."""

    def __init__(
        self, manual_merge_service: ManualMergeService, auth_settings: AuthSettings
    ) -> None:
        """Initialize list manual merges use case.

        Args:
            manual_merge_service: Manual merge domain service
            auth_settings: Authentication settings (admin accounts)
        """
        self.manual_merge_service = manual_merge_service
        self.auth_settings = auth_settings

    async def execute(self, request: ListManualMergesRequest) -> ListManualMergesResponse:
        """Execute list flow.

        Raises:
            NotAuthorizedError: If the caller is not an admin
        """
        ensure_admin(request.admin_id, self.auth_settings, "list manual merges")
        tickets, total = await self.manual_merge_service.list_tickets(
            request.state, page=request.page, per_page=request.per_page
        )
        return ListManualMergesResponse(
            items=[AdminManualMergeItem.from_ticket(t) for t in tickets],
            total=total,
            page=request.page,
            per_page=request.per_page,
            pages=math.ceil(total / request.per_page),
        )
