"""Refresh session use case."""

from uuid import UUID

from pydantic import BaseModel

from cabinet.application.usecase.common import AccountInfo
from cabinet.domain.service import AccountService, JWTService
from cabinet.domain.value import AccountId, AuthProvider


class RefreshSessionRequest(BaseModel):
    """Refresh session request."""

    refresh_token: str


class RefreshSessionResponse(BaseModel):
    """New token pair."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: AccountInfo


class RefreshSessionUseCase:
    """Use case for exchanging a refresh token for a new session."""

    def __init__(
        self, jwt_service: JWTService, account_service: AccountService
    ) -> None:
        """Initialize refresh session use case.

        Args:
            jwt_service: Session token domain service
            account_service: Account domain service
        """
        self.jwt_service = jwt_service
        self.account_service = account_service

    async def execute(self, request: RefreshSessionRequest) -> RefreshSessionResponse:
        """Execute refresh flow.

        A refresh token of an account that was merged away stops working: the
        account is inactive.

        Raises:
            JWTError: If the refresh token is invalid or expired
            NotFoundError: If the account does not exist
            PolicyBlockError: If the account is inactive
        """
        payload = self.jwt_service.verify_refresh_token(request.refresh_token)
        account = await self.account_service.get_active(AccountId(UUID(payload.sub)))
        provider = AuthProvider(payload.auth_provider) if payload.auth_provider else None
        tokens = self.jwt_service.issue_session(account.id, provider)
        return RefreshSessionResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            token_type=tokens.token_type,
            expires_in=tokens.expires_in,
            user=AccountInfo.from_account(account),
        )
