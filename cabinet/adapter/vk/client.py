"""VK OAuth 2.0 client.

The token endpoint returns the user id (and email when granted) together
with the access token; the profile name comes from ``users.get``.
"""

from urllib.parse import urlencode

import httpx
import logfire

from cabinet.domain.service.auth_service import OAuthClient, OAuthError
from cabinet.domain.value import AuthProvider, OAuthProviderInfo

API_VERSION = "5.199"


class VKOAuthError(OAuthError):
    """VK OAuth error."""

    pass


class VKOAuthClient(OAuthClient):
    """Base class for VK OAuth clients.

    Provides type distinction for dependency injection.
    """

    pass


class RealVKOAuthClient(VKOAuthClient):
    """VK OAuth client."""

    authorize_url = "https://oauth.vk.com/authorize"
    token_url = "https://oauth.vk.com/access_token"
    users_get_url = "https://api.vk.com/method/users.get"

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str) -> None:
        """Initialize VK OAuth client.

        Args:
            client_id: VK application ID
            client_secret: VK application secure key
            redirect_uri: Callback URL registered with VK
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self._issued_states: set[str] = set()

    async def initiate_authorization(self, state: str) -> str:
        """Build the VK consent URL for a state."""
        self._issued_states.add(state)
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": "email",
            "state": state,
            "v": API_VERSION,
        }
        logfire.info("VK OAuth authorization initiated")
        return f"{self.authorize_url}?{urlencode(params)}"

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        """Exchange the code and fetch the VK user.

        Raises:
            VKOAuthError: If the state is unknown or VK rejects a call
        """
        if state not in self._issued_states:
            raise VKOAuthError("Invalid state")
        self._issued_states.discard(state)

        token = await self._exchange_code(code)
        user_id = str(token["user_id"])
        profile = await self._get_profile(token["access_token"], user_id)

        name = " ".join(
            p for p in (profile.get("first_name"), profile.get("last_name")) if p
        )
        logfire.info("VK OAuth completed")
        return OAuthProviderInfo(
            provider=AuthProvider.VK,
            provider_user_id=user_id,
            handle=profile.get("screen_name"),
            email=token.get("email"),
            display_name=name or None,
        )

    async def _exchange_code(self, code: str) -> dict:
        params = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "code": code,
        }
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(self.token_url, params=params, timeout=30.0)
        except httpx.HTTPError as e:
            logfire.error("VK token exchange HTTP error", error=str(e))
            raise VKOAuthError(f"HTTP error during token exchange: {e}")

        result = response.json()
        if response.status_code != 200 or "access_token" not in result:
            logfire.error(
                "VK token exchange failed",
                status_code=response.status_code,
                error=result.get("error_description") or result.get("error"),
            )
            raise VKOAuthError(f"Token exchange failed: {response.status_code}")
        return result

    async def _get_profile(self, access_token: str, user_id: str) -> dict:
        params = {
            "user_ids": user_id,
            "fields": "screen_name",
            "access_token": access_token,
            "v": API_VERSION,
        }
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    self.users_get_url, params=params, timeout=30.0
                )
        except httpx.HTTPError as e:
            logfire.error("VK users.get HTTP error", error=str(e))
            raise VKOAuthError(f"HTTP error fetching user: {e}")

        result = response.json()
        # VK reports API errors with HTTP 200 and an "error" object
        if "error" in result or not result.get("response"):
            logfire.error("VK users.get failed", error=str(result.get("error")))
            raise VKOAuthError("users.get failed")
        return result["response"][0]


class MockVKOAuthClient(VKOAuthClient):
    """Mock VK OAuth client for testing."""

    def __init__(self) -> None:
        self.user_info = OAuthProviderInfo(
            provider=AuthProvider.VK,
            provider_user_id="777000",
            handle="id777000",
            display_name="Mock VK User",
        )
        self.fail = False

    async def initiate_authorization(self, state: str) -> str:
        return f"https://oauth.vk.com/authorize?state={state}&mock=true"

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        if self.fail:
            raise VKOAuthError("Simulated VK failure")
        return self.user_info
