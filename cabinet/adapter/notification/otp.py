"""OTP senders for the unlink flow."""

import logfire

from cabinet.adapter.email.relay import EmailRelayClient
from cabinet.adapter.error import ProviderError
from cabinet.adapter.telegram.bot import TelegramBotClient
from cabinet.domain.service.notification import OtpDeliveryError, OtpSender
from cabinet.domain.value import AuthProvider, OtpChannel, OtpDestination

_SUBJECT = "Confirm unlinking a sign-in method"


def otp_message(otp: str, provider: AuthProvider) -> str:
    """Text of the OTP message."""
    return (
        f"Your code to unlink {provider.value} from your account: {otp}\n"
        "If you did not request this, ignore this message and keep your "
        "account safe."
    )


class ChannelOtpSender(OtpSender):
    """Delivers OTPs over Telegram and email.

    A channel without configured credentials is treated as a delivery failure.
    """

    def __init__(
        self,
        telegram: TelegramBotClient | None,
        email: EmailRelayClient | None,
    ) -> None:
        self.telegram = telegram
        self.email = email

    async def send_otp(
        self, destination: OtpDestination, otp: str, provider: AuthProvider
    ) -> None:
        """Deliver an OTP over the destination's channel.

        Raises:
            OtpDeliveryError: If the channel is not configured or delivery failed
        """
        text = otp_message(otp, provider)
        try:
            if destination.channel == OtpChannel.TELEGRAM:
                if self.telegram is None:
                    raise OtpDeliveryError("Telegram bot is not configured")
                await self.telegram.send_message(destination.address, text)
            else:
                if self.email is None:
                    raise OtpDeliveryError("Email relay is not configured")
                await self.email.send(destination.address, _SUBJECT, text)
        except ProviderError as e:
            raise OtpDeliveryError(str(e)) from e

        logfire.info("OTP delivered", channel=destination.channel.value)


class MockOtpSender(OtpSender):
    """OTP sender for tests.

    Keeps every delivered OTP so tests can read the code a user would have
    received. Set ``fail`` to simulate a channel outage.
    """

    def __init__(self) -> None:
        self.sent: list[tuple[OtpDestination, str, AuthProvider]] = []
        self.fail = False

    async def send_otp(
        self, destination: OtpDestination, otp: str, provider: AuthProvider
    ) -> None:
        if self.fail:
            raise OtpDeliveryError("Simulated delivery failure")
        self.sent.append((destination, otp, provider))

    @property
    def last_otp(self) -> str | None:
        return self.sent[-1][1] if self.sent else None
