"""Unit tests for OTP delivery over Telegram and email."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from cabinet.adapter.email.relay import EmailRelayClient
from cabinet.adapter.error import ProviderError
from cabinet.adapter.notification.otp import ChannelOtpSender, otp_message
from cabinet.adapter.telegram.bot import TelegramBotClient
from cabinet.domain.service import OtpDeliveryError
from cabinet.domain.value import AuthProvider, OtpChannel, OtpDestination

TELEGRAM = OtpDestination(channel=OtpChannel.TELEGRAM, address="424242")
EMAIL = OtpDestination(channel=OtpChannel.EMAIL, address="user@example.com")


def mock_response(status_code: int, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    return response


class TestOtpMessage:
    def test_message_names_provider_and_code(self):
        text = otp_message("123456", AuthProvider.VK)

        assert "vk" in text
        assert "123456" in text


class TestTelegramBotClient:
    """Tests for the Bot API client."""

    @pytest.mark.asyncio
    async def test_send_message_posts_to_bot_api(self):
        """Should POST chat id and text to sendMessage."""
        bot = TelegramBotClient("bot-token", api_url="https://tg.test/")

        with patch("httpx.AsyncClient") as mock_client:
            post = AsyncMock(return_value=mock_response(200))
            mock_client.return_value.__aenter__.return_value.post = post

            await bot.send_message("424242", "hello")

        url = post.call_args.args[0]
        assert url == "https://tg.test/botbot-token/sendMessage"
        assert post.call_args.kwargs["json"] == {"chat_id": "424242", "text": "hello"}

    @pytest.mark.asyncio
    async def test_rejected_message_raises_provider_error(self):
        bot = TelegramBotClient("bot-token")

        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=mock_response(403, "bot was blocked by the user")
            )

            with pytest.raises(ProviderError) as exc_info:
                await bot.send_message("424242", "hello")

        assert exc_info.value.status_code == 403
        assert "bot-token" not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_network_error_raises_provider_error(self):
        bot = TelegramBotClient("bot-token")

        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                side_effect=httpx.ConnectError("unreachable")
            )

            with pytest.raises(ProviderError):
                await bot.send_message("424242", "hello")


class TestEmailRelayClient:
    """Tests for the email relay client."""

    @pytest.mark.asyncio
    async def test_send_includes_bearer_token(self):
        relay = EmailRelayClient("https://relay.test/send", token="secret")

        with patch("httpx.AsyncClient") as mock_client:
            post = AsyncMock(return_value=mock_response(202))
            mock_client.return_value.__aenter__.return_value.post = post

            await relay.send("user@example.com", "Subject", "Body")

        assert post.call_args.kwargs["headers"] == {"Authorization": "Bearer secret"}
        assert post.call_args.kwargs["json"] == {
            "to": "user@example.com",
            "subject": "Subject",
            "text": "Body",
        }

    @pytest.mark.asyncio
    async def test_relay_error_raises_provider_error(self):
        relay = EmailRelayClient("https://relay.test/send")

        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=mock_response(500, "boom")
            )

            with pytest.raises(ProviderError) as exc_info:
                await relay.send("user@example.com", "Subject", "Body")

        assert exc_info.value.provider == "email"


class TestChannelOtpSender:
    """Tests for routing OTPs to their channel."""

    @pytest.mark.asyncio
    async def test_telegram_destination_uses_bot(self):
        telegram = MagicMock(spec=TelegramBotClient)
        telegram.send_message = AsyncMock()
        email = MagicMock(spec=EmailRelayClient)
        email.send = AsyncMock()
        sender = ChannelOtpSender(telegram=telegram, email=email)

        await sender.send_otp(TELEGRAM, "654321", AuthProvider.EMAIL)

        telegram.send_message.assert_awaited_once()
        chat_id, text = telegram.send_message.call_args.args
        assert chat_id == "424242"
        assert "654321" in text
        email.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_email_destination_uses_relay(self):
        email = MagicMock(spec=EmailRelayClient)
        email.send = AsyncMock()
        sender = ChannelOtpSender(telegram=None, email=email)

        await sender.send_otp(EMAIL, "654321", AuthProvider.EMAIL)

        to, _subject, text = email.send.call_args.args
        assert to == "user@example.com"
        assert "654321" in text

    @pytest.mark.asyncio
    async def test_unconfigured_channel_fails_delivery(self):
        sender = ChannelOtpSender(telegram=None, email=None)

        with pytest.raises(OtpDeliveryError):
            await sender.send_otp(TELEGRAM, "654321", AuthProvider.EMAIL)

    @pytest.mark.asyncio
    async def test_provider_error_becomes_delivery_error(self):
        telegram = MagicMock(spec=TelegramBotClient)
        telegram.send_message = AsyncMock(side_effect=ProviderError("telegram", "down"))
        sender = ChannelOtpSender(telegram=telegram, email=None)

        with pytest.raises(OtpDeliveryError):
            await sender.send_otp(TELEGRAM, "654321", AuthProvider.EMAIL)
