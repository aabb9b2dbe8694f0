"""Session token domain service."""

import logfire
from pydantic import BaseModel

from cabinet.config import AuthSettings
from cabinet.domain.value import AccountId, AuthProvider
from cabinet.util.clock import Clock
from cabinet.util.jwt import TokenPayload, create_token, verify_token

from .base import Service


class SessionTokens(BaseModel):
    """Access and refresh token pair."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # Access token lifetime in seconds


class JWTService(Service):
    """Domain service for session issuance and verification."""

    def __init__(self, auth_settings: AuthSettings, clock: Clock) -> None:
        """Initialize JWT service.

        Args:
            auth_settings: Authentication settings
            clock: Wall clock
        """
        self.auth_settings = auth_settings
        self.clock = clock

    def issue_session(
        self, account_id: AccountId, auth_provider: AuthProvider | None
    ) -> SessionTokens:
        """Issue a fresh access/refresh token pair for an account.

        Args:
            account_id: Account the session belongs to
            auth_provider: Provider the session was opened with

        Returns:
            Session tokens
        """
        with logfire.span("jwt_service.issue_session", account_id=str(account_id)):
            now = self.clock.now()
            provider = auth_provider.value if auth_provider else None
            tokens = SessionTokens(
                access_token=create_token(
                    str(account_id), "access", provider, self.auth_settings, now
                ),
                refresh_token=create_token(
                    str(account_id), "refresh", provider, self.auth_settings, now
                ),
                expires_in=self.auth_settings.access_token_expiry_minutes * 60,
            )
            logfire.info("Session issued", account_id=str(account_id))
            return tokens

    def verify_access_token(self, token: str) -> TokenPayload:
        """Verify an access token.

        Raises:
            JWTError: If token is invalid, expired or not an access token
        """
        return verify_token(token, self.auth_settings, "access")

    def verify_refresh_token(self, token: str) -> TokenPayload:
        """Verify a refresh token.

        Raises:
            JWTError: If token is invalid, expired or not a refresh token
        """
        return verify_token(token, self.auth_settings, "refresh")
