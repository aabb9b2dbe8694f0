"""Link code and manual merge request routes."""

import logfire

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Cookie, Header
from pydantic import BaseModel, Field

from cabinet.application.usecase.common import (
    ManualMergeTicketCreated,
    ManualMergeTicketStatus,
)
from cabinet.application.usecase.linking import (
    ConfirmLinkCodeRequest,
    ConfirmLinkCodeResponse,
    ConfirmLinkCodeUseCase,
    CreateLinkCodeRequest,
    CreateLinkCodeResponse,
    CreateLinkCodeUseCase,
    PreviewLinkCodeRequest,
    PreviewLinkCodeResponse,
    PreviewLinkCodeUseCase,
)
from cabinet.application.usecase.manual_merge import (
    GetLatestManualMergeRequest,
    GetLatestManualMergeUseCase,
    SubmitManualMergeRequest,
    SubmitManualMergeUseCase,
)
from cabinet.domain.service import JWTService
from cabinet.interface.api.security import authenticate

router = APIRouter(
    prefix="/cabinet/auth/link-code", tags=["linking"], route_class=DishkaRoute
)


class LinkCodeBody(BaseModel):
    """Body carrying a link code."""

    code: str = Field(min_length=1, max_length=64)


class ManualMergeBody(BaseModel):
    """Body of a manual merge request."""

    code: str = Field(min_length=1, max_length=64)
    comment: str | None = Field(default=None, max_length=2000)


@router.post("/create", response_model=CreateLinkCodeResponse)
async def create_link_code(
    use_case: FromDishka[CreateLinkCodeUseCase],
    jwt_service: FromDishka[JWTService],
    authorization: str | None = Header(default=None),
    auth_token: str | None = Cookie(default=None),
) -> CreateLinkCodeResponse:
    """Issue a link code on the account that should be merged away.

    The code is entered on the other account, which survives the merge.
    Creating a code revokes the previous one.
    """
    principal = authenticate(jwt_service, authorization, auth_token)
    return await use_case.execute(
        CreateLinkCodeRequest(account_id=principal.account_id)
    )


@router.post("/preview", response_model=PreviewLinkCodeResponse)
async def preview_link_code(
    body: LinkCodeBody,
    use_case: FromDishka[PreviewLinkCodeUseCase],
    jwt_service: FromDishka[JWTService],
    authorization: str | None = Header(default=None),
    auth_token: str | None = Cookie(default=None),
) -> PreviewLinkCodeResponse:
    """Show what confirming a code would do.

    Example:
        POST /cabinet/auth/link-code/preview
        {"code": "ABC123"}

        Response:
        {
            "source_user_id": "...",
            "source_identity_hints": {"telegram": "12***89"},
            "manual_merge_required": false,
            "conflict_reason": null,
            "telegram_replace_warning": false
        }
    """
    principal = authenticate(jwt_service, authorization, auth_token)
    return await use_case.execute(
        PreviewLinkCodeRequest(code=body.code, account_id=principal.account_id)
    )


@router.post("/confirm", response_model=ConfirmLinkCodeResponse)
async def confirm_link_code(
    body: LinkCodeBody,
    use_case: FromDishka[ConfirmLinkCodeUseCase],
    jwt_service: FromDishka[JWTService],
    authorization: str | None = Header(default=None),
    auth_token: str | None = Cookie(default=None),
) -> ConfirmLinkCodeResponse:
    """Redeem a code, merge the accounts and return a fresh session."""
    principal = authenticate(jwt_service, authorization, auth_token)
    response = await use_case.execute(
        ConfirmLinkCodeRequest(
            code=body.code,
            account_id=principal.account_id,
            auth_provider=principal.auth_provider,
        )
    )
    logfire.info("Link code confirmed", account_id=principal.account_id)
    return response


@router.post("/manual-request", response_model=ManualMergeTicketCreated)
async def submit_manual_merge(
    body: ManualMergeBody,
    use_case: FromDishka[SubmitManualMergeUseCase],
    jwt_service: FromDishka[JWTService],
    authorization: str | None = Header(default=None),
    auth_token: str | None = Cookie(default=None),
) -> ManualMergeTicketCreated:
    """Ask support to merge two accounts that cannot be merged automatically."""
    principal = authenticate(jwt_service, authorization, auth_token)
    return await use_case.execute(
        SubmitManualMergeRequest(
            code=body.code, account_id=principal.account_id, comment=body.comment
        )
    )


@router.get(
    "/manual-request/latest", response_model=ManualMergeTicketStatus | None
)
async def get_latest_manual_merge(
    use_case: FromDishka[GetLatestManualMergeUseCase],
    jwt_service: FromDishka[JWTService],
    authorization: str | None = Header(default=None),
    auth_token: str | None = Cookie(default=None),
) -> ManualMergeTicketStatus | None:
    """State of the caller's newest manual merge request."""
    principal = authenticate(jwt_service, authorization, auth_token)
    return await use_case.execute(
        GetLatestManualMergeRequest(account_id=principal.account_id)
    )
