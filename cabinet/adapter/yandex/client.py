"""Yandex ID OAuth 2.0 client.

Authorization code flow with PKCE against ``oauth.yandex.ru``; the user is
read from ``login.yandex.ru/info``.
"""

import hashlib
import secrets
from base64 import urlsafe_b64encode
from urllib.parse import urlencode

import httpx
import logfire

from cabinet.domain.service.auth_service import OAuthClient, OAuthError
from cabinet.domain.value import AuthProvider, OAuthProviderInfo


class YandexOAuthError(OAuthError):
    """Yandex OAuth error."""

    pass


class YandexOAuthClient(OAuthClient):
    """Base class for Yandex OAuth clients.

    Provides type distinction for dependency injection.
    """

    pass


def _pkce_pair() -> tuple[str, str]:
    verifier = urlsafe_b64encode(secrets.token_bytes(32)).decode().rstrip("=")
    digest = hashlib.sha256(verifier.encode()).digest()
    challenge = urlsafe_b64encode(digest).decode().rstrip("=")
    return verifier, challenge


class RealYandexOAuthClient(YandexOAuthClient):
    """Yandex ID client."""

    authorize_url = "https://oauth.yandex.ru/authorize"
    token_url = "https://oauth.yandex.ru/token"
    user_info_url = "https://login.yandex.ru/info"

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str) -> None:
        """Initialize Yandex OAuth client.

        Args:
            client_id: Yandex application ID
            client_secret: Yandex application password
            redirect_uri: Callback URL registered with Yandex
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

        # PKCE verifiers by state, held until the callback arrives
        self._verifiers: dict[str, str] = {}

    async def initiate_authorization(self, state: str) -> str:
        """Build the Yandex consent URL for a state."""
        verifier, challenge = _pkce_pair()
        self._verifiers[state] = verifier

        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "state": state,
            "code_challenge": challenge,
            "code_challenge_method": "S256",
        }
        logfire.info("Yandex OAuth authorization initiated")
        return f"{self.authorize_url}?{urlencode(params)}"

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        """Exchange the code and fetch the Yandex user.

        Raises:
            YandexOAuthError: If the state is unknown or Yandex rejects a call
        """
        verifier = self._verifiers.pop(state, None)
        if not verifier:
            raise YandexOAuthError("Invalid state or PKCE verifier not found")

        access_token = await self._exchange_code(code, verifier)
        user = await self._get_user_info(access_token)

        logfire.info("Yandex OAuth completed")
        return OAuthProviderInfo(
            provider=AuthProvider.YANDEX,
            provider_user_id=str(user["id"]),
            handle=user.get("login"),
            email=user.get("default_email"),
            display_name=user.get("display_name") or user.get("real_name"),
        )

    async def _exchange_code(self, code: str, verifier: str) -> str:
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "code_verifier": verifier,
        }
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.token_url,
                    data=data,
                    auth=(self.client_id, self.client_secret),
                    timeout=30.0,
                )
        except httpx.HTTPError as e:
            logfire.error("Yandex token exchange HTTP error", error=str(e))
            raise YandexOAuthError(f"HTTP error during token exchange: {e}")

        if response.status_code != 200:
            logfire.error(
                "Yandex token exchange failed",
                status_code=response.status_code,
                error=response.text,
            )
            raise YandexOAuthError(f"Token exchange failed: {response.status_code}")
        return response.json()["access_token"]

    async def _get_user_info(self, access_token: str) -> dict:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    self.user_info_url,
                    params={"format": "json"},
                    headers={"Authorization": f"OAuth {access_token}"},
                    timeout=30.0,
                )
        except httpx.HTTPError as e:
            logfire.error("Yandex user info HTTP error", error=str(e))
            raise YandexOAuthError(f"HTTP error fetching user info: {e}")

        if response.status_code != 200:
            logfire.error(
                "Yandex user info request failed", status_code=response.status_code
            )
            raise YandexOAuthError(f"User info request failed: {response.status_code}")
        return response.json()


class MockYandexOAuthClient(YandexOAuthClient):
    """Mock Yandex OAuth client for testing.

    ``complete_authorization`` returns ``user_info`` (a fixed user unless a
    test replaces it) and fails when ``fail`` is set.
    """

    def __init__(self) -> None:
        self.user_info = OAuthProviderInfo(
            provider=AuthProvider.YANDEX,
            provider_user_id="yandex-100500",
            handle="mock.user",
            email="mock.user@yandex.ru",
            display_name="Mock Yandex User",
        )
        self.fail = False

    async def initiate_authorization(self, state: str) -> str:
        return f"https://oauth.yandex.ru/authorize?state={state}&mock=true"

    async def complete_authorization(self, code: str, state: str) -> OAuthProviderInfo:
        if self.fail:
            raise YandexOAuthError("Simulated Yandex failure")
        return self.user_info
