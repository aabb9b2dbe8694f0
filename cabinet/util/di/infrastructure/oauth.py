"""OAuth infrastructure providers."""

from dishka import Scope, provide

from cabinet.adapter.vk.client import RealVKOAuthClient, VKOAuthClient
from cabinet.adapter.yandex.client import RealYandexOAuthClient, YandexOAuthClient
from cabinet.config import Settings
from cabinet.domain.service import OAuthClient
from cabinet.domain.value import AuthProvider
from cabinet.util.di.base import ProviderBase


class OAuthProvider(ProviderBase):
    """OAuth component base."""

    __mock_component__ = "oauth"


class ProdOAuthProvider(OAuthProvider):
    """Production Yandex ID and VK clients."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_yandex_oauth_client(self, settings: Settings) -> YandexOAuthClient:
        """Provide Yandex OAuth client."""
        return RealYandexOAuthClient(
            client_id=settings.auth.yandex.client_id,
            client_secret=settings.auth.yandex.client_secret,
            redirect_uri=settings.auth.yandex_callback_url,
        )

    @provide(scope=Scope.APP)
    def get_vk_oauth_client(self, settings: Settings) -> VKOAuthClient:
        """Provide VK OAuth client."""
        return RealVKOAuthClient(
            client_id=settings.auth.vk.client_id,
            client_secret=settings.auth.vk.client_secret,
            redirect_uri=settings.auth.vk_callback_url,
        )


class OAuthAggregatorProvider(ProviderBase):
    """Provider that aggregates all OAuth clients into a dictionary."""

    scope = Scope.APP

    @provide(scope=Scope.APP)
    def get_oauth_clients(
        self,
        yandex_oauth_client: YandexOAuthClient,
        vk_oauth_client: VKOAuthClient,
    ) -> dict[AuthProvider, OAuthClient]:
        """Provide OAuth clients by provider for the AuthService."""
        return {
            AuthProvider.YANDEX: yandex_oauth_client,
            AuthProvider.VK: vk_oauth_client,
        }
