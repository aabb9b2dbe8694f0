"""Telegram Bot API client.

Only ``sendMessage`` is needed: unlink OTPs are delivered as a private
message to the Telegram user, whose chat id equals their user id.
"""

import httpx
import logfire

from cabinet.adapter.error import ProviderError


class TelegramBotClient:
    """Minimal async client for the Telegram Bot API."""

    def __init__(
        self,
        bot_token: str,
        api_url: str = "https://api.telegram.org",
        timeout: float = 10.0,
    ) -> None:
        """Initialize Telegram bot client.

        Args:
            bot_token: Token issued by BotFather
            api_url: Bot API base URL
            timeout: Request timeout in seconds
        """
        self.bot_token = bot_token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    async def send_message(self, chat_id: str, text: str) -> None:
        """Send a plain text message.

        Args:
            chat_id: Target chat (the user's Telegram id)
            text: Message text

        Raises:
            ProviderError: If the Bot API rejects the message or is unreachable
        """
        url = f"{self.api_url}/bot{self.bot_token}/sendMessage"
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url,
                    json={"chat_id": chat_id, "text": text},
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            logfire.error("Telegram Bot API HTTP error", error=str(e))
            raise ProviderError("telegram", f"HTTP error sending message: {e}")

        if response.status_code != 200:
            # The request URL carries the bot token and is never logged
            description = response.text
            logfire.error(
                "Telegram sendMessage failed",
                status_code=response.status_code,
                error=description,
            )
            raise ProviderError(
                "telegram", f"sendMessage failed: {description}", response.status_code
            )
