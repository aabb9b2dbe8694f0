"""OAuth provider domain service."""

import logfire

from cabinet.domain.error import (
    DependencyUnavailableError,
    ErrorCode,
    PolicyBlockError,
)
from cabinet.domain.value import AuthProvider, BlockReason, OAuthProviderInfo

from .base import Service


class OAuthError(Exception):
    """Raised by OAuth clients when the provider exchange fails."""

    pass


class OAuthClient:
    """Generic OAuth client interface for all providers."""

    async def initiate_authorization(self, state: str) -> str:
        """Initiate OAuth authorization flow.

        Args:
            state: State parameter for CSRF protection

        Returns:
            Authorization URL to redirect user to
        """
        raise NotImplementedError

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        """Complete OAuth authorization flow.

        Args:
            code: Authorization code from OAuth callback
            state: State parameter for verification

        Returns:
            Provider user information

        Raises:
            OAuthError: If the exchange with the provider fails
        """
        raise NotImplementedError


class AuthService(Service):
    """Domain service for OAuth identity providers.

    Coordinates the authorization code flow across the configured providers
    (Yandex, VK).
    """

    def __init__(self, oauth_clients: dict[AuthProvider, OAuthClient]) -> None:
        """Initialize auth service.

        Args:
            oauth_clients: Map of provider to OAuth client implementation
        """
        self.oauth_clients = oauth_clients

    def _client(self, provider: AuthProvider) -> OAuthClient:
        client = self.oauth_clients.get(provider)
        if not client:
            raise PolicyBlockError(
                ErrorCode.PROVIDER_NOT_SUPPORTED,
                "This provider cannot be linked",
                reason=BlockReason.PROVIDER_NOT_SUPPORTED.value,
            )
        return client

    async def initiate(self, provider: AuthProvider, state: str) -> str:
        """Start the OAuth flow for a provider.

        Args:
            provider: OAuth provider
            state: State parameter for CSRF protection

        Returns:
            Authorization URL to redirect the user to

        Raises:
            PolicyBlockError: If the provider is not configured
        """
        return await self._client(provider).initiate_authorization(state)

    async def complete(
        self, provider: AuthProvider, code: str, state: str
    ) -> OAuthProviderInfo:
        """Finish the OAuth flow and return the provider's user info.

        Raises:
            PolicyBlockError: If the provider is not configured
            DependencyUnavailableError: If the provider exchange failed
        """
        client = self._client(provider)
        try:
            return await client.complete_authorization(code, state)
        except OAuthError as e:
            logfire.error(
                "OAuth completion failed", provider=provider.value, error=str(e)
            )
            raise DependencyUnavailableError(ErrorCode.OAUTH_FAILED)
