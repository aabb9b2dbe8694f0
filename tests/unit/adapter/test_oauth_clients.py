"""Unit tests for the Yandex and VK OAuth clients."""

from unittest.mock import AsyncMock, MagicMock, patch
from urllib.parse import parse_qs, urlparse

import pytest

from cabinet.adapter.vk.client import RealVKOAuthClient, VKOAuthError
from cabinet.adapter.yandex.client import RealYandexOAuthClient, YandexOAuthError
from cabinet.domain.value import AuthProvider


def json_response(status_code: int, payload: dict) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = str(payload)
    response.json.return_value = payload
    return response


class TestYandexOAuthClient:
    """Tests for RealYandexOAuthClient."""

    @pytest.mark.asyncio
    async def test_authorization_url_carries_state_and_pkce(self):
        client = RealYandexOAuthClient("client", "secret", "https://api.test/cb")

        url = await client.initiate_authorization("state-1")

        query = parse_qs(urlparse(url).query)
        assert url.startswith("https://oauth.yandex.ru/authorize?")
        assert query["state"] == ["state-1"]
        assert query["client_id"] == ["client"]
        assert query["code_challenge_method"] == ["S256"]

    @pytest.mark.asyncio
    async def test_complete_returns_provider_info(self):
        client = RealYandexOAuthClient("client", "secret", "https://api.test/cb")
        await client.initiate_authorization("state-1")

        with patch("httpx.AsyncClient") as mock_client:
            http = mock_client.return_value.__aenter__.return_value
            http.post = AsyncMock(
                return_value=json_response(200, {"access_token": "token"})
            )
            http.get = AsyncMock(
                return_value=json_response(
                    200,
                    {
                        "id": 100500,
                        "login": "ivan",
                        "default_email": "ivan@yandex.ru",
                        "display_name": "Ivan",
                    },
                )
            )

            info = await client.complete_authorization("code", "state-1")

        assert info.provider == AuthProvider.YANDEX
        assert info.provider_user_id == "100500"
        assert info.email == "ivan@yandex.ru"
        assert http.get.call_args.kwargs["headers"] == {
            "Authorization": "OAuth token"
        }

    @pytest.mark.asyncio
    async def test_unknown_state_is_rejected(self):
        client = RealYandexOAuthClient("client", "secret", "https://api.test/cb")

        with pytest.raises(YandexOAuthError):
            await client.complete_authorization("code", "never-issued")

    @pytest.mark.asyncio
    async def test_state_is_single_use(self):
        client = RealYandexOAuthClient("client", "secret", "https://api.test/cb")
        await client.initiate_authorization("state-1")

        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=json_response(400, {"error": "invalid_grant"})
            )
            with pytest.raises(YandexOAuthError):
                await client.complete_authorization("code", "state-1")

        with pytest.raises(YandexOAuthError) as exc_info:
            await client.complete_authorization("code", "state-1")
        assert "state" in str(exc_info.value)


class TestVKOAuthClient:
    """Tests for RealVKOAuthClient."""

    @pytest.mark.asyncio
    async def test_complete_combines_token_and_profile(self):
        client = RealVKOAuthClient("client", "secret", "https://api.test/cb")
        await client.initiate_authorization("state-1")

        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                side_effect=[
                    json_response(
                        200,
                        {"access_token": "t", "user_id": 777, "email": "a@vk.com"},
                    ),
                    json_response(
                        200,
                        {
                            "response": [
                                {
                                    "first_name": "Anna",
                                    "last_name": "K",
                                    "screen_name": "anna",
                                }
                            ]
                        },
                    ),
                ]
            )

            info = await client.complete_authorization("code", "state-1")

        assert info.provider == AuthProvider.VK
        assert info.provider_user_id == "777"
        assert info.email == "a@vk.com"
        assert info.display_name == "Anna K"

    @pytest.mark.asyncio
    async def test_api_error_inside_200_is_rejected(self):
        client = RealVKOAuthClient("client", "secret", "https://api.test/cb")
        await client.initiate_authorization("state-1")

        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                side_effect=[
                    json_response(200, {"access_token": "t", "user_id": 777}),
                    json_response(200, {"error": {"error_code": 5}}),
                ]
            )

            with pytest.raises(VKOAuthError):
                await client.complete_authorization("code", "state-1")
