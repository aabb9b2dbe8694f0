"""OTP delivery infrastructure providers."""

from dishka import Scope, provide

from cabinet.adapter.email.relay import EmailRelayClient
from cabinet.adapter.notification.otp import ChannelOtpSender
from cabinet.adapter.telegram.bot import TelegramBotClient
from cabinet.config import NotificationSettings
from cabinet.domain.service import OtpSender
from cabinet.util.di.base import ProviderBase


class NotificationsProvider(ProviderBase):
    """Notifications component base."""

    __mock_component__ = "notifications"


class ProdNotificationsProvider(NotificationsProvider):
    """Production OTP delivery over the Telegram Bot API and the email relay."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_otp_sender(self, settings: NotificationSettings) -> OtpSender:
        """Provide OTP sender.

        A channel without credentials is left unconfigured; delivering to it
        fails with ``unlink_otp_delivery_failed``.
        """
        telegram = (
            TelegramBotClient(
                bot_token=settings.telegram_bot_token,
                api_url=settings.telegram_api_url,
                timeout=settings.timeout_seconds,
            )
            if settings.telegram_bot_token
            else None
        )
        email = (
            EmailRelayClient(
                relay_url=settings.email_relay_url,
                token=settings.email_relay_token,
                timeout=settings.timeout_seconds,
            )
            if settings.email_relay_url
            else None
        )
        return ChannelOtpSender(telegram=telegram, email=email)
