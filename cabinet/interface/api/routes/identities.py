"""Linked identity routes."""

import logfire

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Cookie, Header
from pydantic import BaseModel, Field

from cabinet.application.usecase.identity import (
    ConfirmUnlinkRequest,
    ConfirmUnlinkResponse,
    ConfirmUnlinkUseCase,
    InitiateOAuthLinkRequest,
    InitiateOAuthLinkResponse,
    InitiateOAuthLinkUseCase,
    LinkIdentityResponse,
    LinkOAuthIdentityRequest,
    LinkOAuthIdentityUseCase,
    LinkTelegramRequest,
    LinkTelegramUseCase,
    ListLinkedIdentitiesRequest,
    ListLinkedIdentitiesResponse,
    ListLinkedIdentitiesUseCase,
    RequestUnlinkRequest,
    RequestUnlinkResponse,
    RequestUnlinkUseCase,
)
from cabinet.domain.service import JWTService
from cabinet.domain.value import TelegramLoginData
from cabinet.interface.api.security import authenticate

router = APIRouter(
    prefix="/cabinet/auth/identities", tags=["identities"], route_class=DishkaRoute
)


class ConfirmUnlinkBody(BaseModel):
    """Body of an unlink confirmation."""

    request_token: str = Field(min_length=1, max_length=256)
    otp_code: str = Field(min_length=1, max_length=16)


class OAuthLinkBody(BaseModel):
    """Authorization code and state returned by the provider callback."""

    code: str
    state: str


@router.get("", response_model=ListLinkedIdentitiesResponse)
async def list_linked_identities(
    use_case: FromDishka[ListLinkedIdentitiesUseCase],
    jwt_service: FromDishka[JWTService],
    authorization: str | None = Header(default=None),
    auth_token: str | None = Cookie(default=None),
) -> ListLinkedIdentitiesResponse:
    """List the caller's identities with their unlink availability."""
    principal = authenticate(jwt_service, authorization, auth_token)
    return await use_case.execute(
        ListLinkedIdentitiesRequest(
            account_id=principal.account_id, auth_provider=principal.auth_provider
        )
    )


@router.post("/telegram/link", response_model=LinkIdentityResponse)
async def link_telegram(
    body: TelegramLoginData,
    use_case: FromDishka[LinkTelegramUseCase],
    jwt_service: FromDishka[JWTService],
    authorization: str | None = Header(default=None),
    auth_token: str | None = Cookie(default=None),
) -> LinkIdentityResponse:
    """Attach a Telegram identity from a signed login widget payload."""
    principal = authenticate(jwt_service, authorization, auth_token)
    return await use_case.execute(
        LinkTelegramRequest(account_id=principal.account_id, login_data=body)
    )


@router.post("/oauth/{provider}/authorize", response_model=InitiateOAuthLinkResponse)
async def initiate_oauth_link(
    provider: str,
    use_case: FromDishka[InitiateOAuthLinkUseCase],
    jwt_service: FromDishka[JWTService],
    authorization: str | None = Header(default=None),
    auth_token: str | None = Cookie(default=None),
) -> InitiateOAuthLinkResponse:
    """Start an OAuth flow whose callback links the identity."""
    authenticate(jwt_service, authorization, auth_token)
    return await use_case.execute(InitiateOAuthLinkRequest(provider=provider))


@router.post("/oauth/{provider}/link", response_model=LinkIdentityResponse)
async def link_oauth_identity(
    provider: str,
    body: OAuthLinkBody,
    use_case: FromDishka[LinkOAuthIdentityUseCase],
    jwt_service: FromDishka[JWTService],
    authorization: str | None = Header(default=None),
    auth_token: str | None = Cookie(default=None),
) -> LinkIdentityResponse:
    """Finish an OAuth flow and attach the identity."""
    principal = authenticate(jwt_service, authorization, auth_token)
    return await use_case.execute(
        LinkOAuthIdentityRequest(
            account_id=principal.account_id,
            provider=provider,
            code=body.code,
            state=body.state,
        )
    )


@router.post("/{provider}/unlink/request", response_model=RequestUnlinkResponse)
async def request_unlink(
    provider: str,
    use_case: FromDishka[RequestUnlinkUseCase],
    jwt_service: FromDishka[JWTService],
    authorization: str | None = Header(default=None),
    auth_token: str | None = Cookie(default=None),
) -> RequestUnlinkResponse:
    """Send an OTP that confirms unlinking ``provider``."""
    principal = authenticate(jwt_service, authorization, auth_token)
    logfire.info(
        "Unlink requested", account_id=principal.account_id, provider=provider
    )
    return await use_case.execute(
        RequestUnlinkRequest(
            account_id=principal.account_id,
            provider=provider,
            auth_provider=principal.auth_provider,
        )
    )


@router.post("/{provider}/unlink/confirm", response_model=ConfirmUnlinkResponse)
async def confirm_unlink(
    provider: str,
    body: ConfirmUnlinkBody,
    use_case: FromDishka[ConfirmUnlinkUseCase],
    jwt_service: FromDishka[JWTService],
    authorization: str | None = Header(default=None),
    auth_token: str | None = Cookie(default=None),
) -> ConfirmUnlinkResponse:
    """Unlink ``provider`` with the request token and the delivered OTP."""
    principal = authenticate(jwt_service, authorization, auth_token)
    return await use_case.execute(
        ConfirmUnlinkRequest(
            account_id=principal.account_id,
            provider=provider,
            request_token=body.request_token,
            otp_code=body.otp_code,
            auth_provider=principal.auth_provider,
        )
    )
