"""Telegram login widget verification.

The widget signs its payload with HMAC-SHA256 keyed by SHA256 of the bot
token over the ``key=value`` lines of all other fields, sorted by key.
"""

import hashlib
import hmac

import logfire

from cabinet.config import AuthSettings
from cabinet.domain.error import ErrorCode, ValidationError
from cabinet.domain.value import AuthProvider, OAuthProviderInfo, TelegramLoginData
from cabinet.util.clock import Clock

from .base import Service


def data_check_string(data: TelegramLoginData) -> str:
    """Build the string the widget signature is computed over."""
    fields = data.model_dump(exclude={"hash"}, exclude_none=True)
    return "\n".join(f"{key}={fields[key]}" for key in sorted(fields))


def sign_login_data(data: TelegramLoginData, bot_token: str) -> str:
    """Compute the widget signature for a payload."""
    secret = hashlib.sha256(bot_token.encode()).digest()
    return hmac.new(
        secret, data_check_string(data).encode(), hashlib.sha256
    ).hexdigest()


class TelegramAuthService(Service):
    """Verifies Telegram login widget payloads."""

    def __init__(self, auth_settings: AuthSettings, clock: Clock) -> None:
        self.auth_settings = auth_settings
        self.clock = clock

    def verify(self, data: TelegramLoginData) -> OAuthProviderInfo:
        """Check signature and freshness of a widget payload.

        Args:
            data: Payload as posted by the widget

        Returns:
            The Telegram user as provider info

        Raises:
            ValidationError: If the signature is wrong or the payload is stale
        """
        expected = sign_login_data(data, self.auth_settings.telegram_bot_token)
        if not hmac.compare_digest(expected, data.hash):
            logfire.warn("Telegram login signature mismatch", telegram_id=data.id)
            raise ValidationError(ErrorCode.TELEGRAM_AUTH_INVALID)

        age = self.clock.now().timestamp() - data.auth_date
        if age > self.auth_settings.telegram_auth_max_age_seconds:
            logfire.warn("Telegram login payload expired", age_seconds=int(age))
            raise ValidationError(
                ErrorCode.TELEGRAM_AUTH_INVALID, "Telegram authorization expired"
            )

        name = " ".join(p for p in (data.first_name, data.last_name) if p) or None
        return OAuthProviderInfo(
            provider=AuthProvider.TELEGRAM,
            provider_user_id=str(data.id),
            handle=data.username,
            display_name=name,
        )
