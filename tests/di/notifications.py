"""Mock OTP delivery providers for testing."""

from dishka import Scope, provide

from cabinet.adapter.notification.otp import MockOtpSender
from cabinet.domain.service import OtpSender
from cabinet.util.di.infrastructure.notifications import NotificationsProvider


class MockNotificationsProvider(NotificationsProvider):
    """Records OTPs instead of sending them."""

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_mock_otp_sender(self) -> MockOtpSender:
        """Provide the recording sender (tests read delivered codes from it)."""
        return MockOtpSender()

    @provide(scope=Scope.APP)
    def get_otp_sender(self, sender: MockOtpSender) -> OtpSender:
        """Provide the recording sender as the OTP port."""
        return sender
