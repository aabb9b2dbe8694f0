"""Email relay client.

Email is sent through an internal HTTP relay that accepts
``{"to", "subject", "text"}`` with a bearer token.
"""

import httpx
import logfire

from cabinet.adapter.error import ProviderError


class EmailRelayClient:
    """Async client for the email relay."""

    def __init__(self, relay_url: str, token: str | None = None, timeout: float = 10.0):
        self.relay_url = relay_url
        self.token = token
        self.timeout = timeout

    async def send(self, to: str, subject: str, text: str) -> None:
        """Hand an email to the relay.

        Raises:
            ProviderError: If the relay refuses the message or is unreachable
        """
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.relay_url,
                    json={"to": to, "subject": subject, "text": text},
                    headers=headers,
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            logfire.error("Email relay HTTP error", error=str(e))
            raise ProviderError("email", f"HTTP error sending email: {e}")

        if response.status_code >= 300:
            logfire.error(
                "Email relay rejected message",
                status_code=response.status_code,
                error=response.text,
            )
            raise ProviderError(
                "email", f"Relay returned {response.status_code}", response.status_code
            )
