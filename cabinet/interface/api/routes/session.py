"""Session routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter
from pydantic import BaseModel

from cabinet.application.usecase.auth import (
    RefreshSessionRequest,
    RefreshSessionResponse,
    RefreshSessionUseCase,
)

router = APIRouter(prefix="/cabinet/auth", tags=["session"], route_class=DishkaRoute)


class RefreshBody(BaseModel):
    """Refresh token body."""

    refresh_token: str


@router.post("/refresh", response_model=RefreshSessionResponse)
async def refresh_session(
    body: RefreshBody, use_case: FromDishka[RefreshSessionUseCase]
) -> RefreshSessionResponse:
    """Exchange a refresh token for a new token pair.

    Returns 401 for invalid or expired refresh tokens.
    """
    return await use_case.execute(
        RefreshSessionRequest(refresh_token=body.refresh_token)
    )
