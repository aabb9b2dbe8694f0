"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from cabinet.config import (
    AuthSettings,
    LinkingSettings,
    NotificationSettings,
    Settings,
    SupportSettings,
    UnlinkSettings,
)
from cabinet.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically;
    each section is exposed on its own so services depend only on theirs.
    """

    scope = Scope.APP

    @provide
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide
    def provide_auth_settings(self, settings: Settings) -> AuthSettings:
        return settings.auth

    @provide
    def provide_linking_settings(self, settings: Settings) -> LinkingSettings:
        return settings.linking

    @provide
    def provide_unlink_settings(self, settings: Settings) -> UnlinkSettings:
        return settings.unlink

    @provide
    def provide_support_settings(self, settings: Settings) -> SupportSettings:
        return settings.support

    @provide
    def provide_notification_settings(
        self, settings: Settings
    ) -> NotificationSettings:
        return settings.notifications
