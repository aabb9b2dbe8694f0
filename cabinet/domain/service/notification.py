"""OTP delivery port."""

from cabinet.domain.value import AuthProvider, OtpDestination


class OtpDeliveryError(Exception):
    """Raised by senders when a message could not be handed to its channel."""

    pass


class OtpSender:
    """Out-of-band channel for unlink confirmation codes."""

    async def send_otp(
        self, destination: OtpDestination, otp: str, provider: AuthProvider
    ) -> None:
        """Deliver an OTP.

        Args:
            destination: Channel and address to deliver to
            otp: Plain one-time password
            provider: Provider whose unlink is being confirmed

        Raises:
            OtpDeliveryError: If delivery failed
        """
        raise NotImplementedError
