"""Admin routes for manual merge adjudication."""

import logfire
from typing import Literal
from uuid import UUID

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Cookie, Header, Query
from pydantic import BaseModel, Field

from cabinet.application.usecase.common import AdminManualMergeItem
from cabinet.application.usecase.manual_merge import (
    ListManualMergesRequest,
    ListManualMergesResponse,
    ListManualMergesUseCase,
    ResolveManualMergeRequest,
    ResolveManualMergeUseCase,
)
from cabinet.domain.service import JWTService
from cabinet.domain.value import ManualMergeStateFilter
from cabinet.interface.api.security import authenticate

router = APIRouter(
    prefix="/cabinet/admin/account-linking",
    tags=["admin"],
    route_class=DishkaRoute,
)


class ResolveBody(BaseModel):
    """Adjudication decision."""

    action: Literal["approve", "reject"]
    primary_user_id: UUID | None = None
    comment: str | None = Field(default=None, max_length=2000)


@router.get("/manual-merges", response_model=ListManualMergesResponse)
async def list_manual_merges(
    use_case: FromDishka[ListManualMergesUseCase],
    jwt_service: FromDishka[JWTService],
    state: ManualMergeStateFilter = ManualMergeStateFilter.PENDING,
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=20, ge=1, le=100),
    authorization: str | None = Header(default=None),
    auth_token: str | None = Cookie(default=None),
) -> ListManualMergesResponse:
    """List manual merge tickets, newest first. Admins only."""
    principal = authenticate(jwt_service, authorization, auth_token)
    return await use_case.execute(
        ListManualMergesRequest(
            admin_id=principal.account_id, state=state, page=page, per_page=per_page
        )
    )


@router.post(
    "/manual-merges/{ticket_id}/resolve", response_model=AdminManualMergeItem
)
async def resolve_manual_merge(
    ticket_id: UUID,
    body: ResolveBody,
    use_case: FromDishka[ResolveManualMergeUseCase],
    jwt_service: FromDishka[JWTService],
    authorization: str | None = Header(default=None),
    auth_token: str | None = Cookie(default=None),
) -> AdminManualMergeItem:
    """Approve or reject a pending ticket. Admins only.

    Example:
        POST /cabinet/admin/account-linking/manual-merges/{id}/resolve
        {"action": "approve", "primary_user_id": "...", "comment": "verified"}
    """
    principal = authenticate(jwt_service, authorization, auth_token)
    logfire.info(
        "Resolving manual merge",
        ticket_id=str(ticket_id),
        admin_id=principal.account_id,
    )
    return await use_case.execute(
        ResolveManualMergeRequest(
            admin_id=principal.account_id,
            ticket_id=ticket_id,
            action=body.action,
            primary_user_id=body.primary_user_id,
            comment=body.comment,
        )
    )
