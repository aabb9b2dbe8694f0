"""Initiate OAuth link use case."""

import secrets

from pydantic import BaseModel

from cabinet.application.usecase.common import parse_provider
from cabinet.domain.service import AuthService


class InitiateOAuthLinkRequest(BaseModel):
    """Initiate OAuth link request."""

    provider: str


class InitiateOAuthLinkResponse(BaseModel):
    """Where to send the browser, and the state to return on callback."""

    authorization_url: str
    state: str


class InitiateOAuthLinkUseCase:
    """Use case for starting an OAuth flow that ends in an identity link."""

    def __init__(self, auth_service: AuthService) -> None:
        self.auth_service = auth_service

    async def execute(
        self, request: InitiateOAuthLinkRequest
    ) -> InitiateOAuthLinkResponse:
        """Execute initiate flow.

        Raises:
            PolicyBlockError: If the provider has no OAuth client
        """
        provider = parse_provider(request.provider)
        state = secrets.token_urlsafe(32)
        url = await self.auth_service.initiate(provider, state)
        return InitiateOAuthLinkResponse(authorization_url=url, state=state)
