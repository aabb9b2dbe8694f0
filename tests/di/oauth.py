"""Mock OAuth providers for testing."""

from dishka import Scope, provide

from cabinet.adapter.vk.client import MockVKOAuthClient, VKOAuthClient
from cabinet.adapter.yandex.client import MockYandexOAuthClient, YandexOAuthClient
from cabinet.util.di.infrastructure.oauth import OAuthProvider


class MockOAuthProvider(OAuthProvider):
    """Mock OAuth provider using fixed-user clients."""

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_yandex_oauth_client(self) -> YandexOAuthClient:
        """Provide mock Yandex OAuth client."""
        return MockYandexOAuthClient()

    @provide(scope=Scope.APP)
    def get_vk_oauth_client(self) -> VKOAuthClient:
        """Provide mock VK OAuth client."""
        return MockVKOAuthClient()
