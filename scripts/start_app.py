#!/usr/bin/env python3
"""Start the FastAPI application with Logfire error tracking for startup errors."""

import sys

import logfire
import uvicorn

from cabinet.config import Settings
from cabinet.util.error import ConfigurationError
from cabinet.util.logging import setup_logging
from cabinet.util.observability import configure_logfire

_PLACEHOLDER = "CHANGE_ME_IN_PRODUCTION"


def check_secrets(settings: Settings) -> None:
    """Refuse to serve production traffic with placeholder secrets.

    Raises:
        ConfigurationError: If a secret still has its placeholder value
    """
    if settings.environment != "production":
        return
    placeholders = [
        name
        for name, value in (
            ("AUTH__JWT_SECRET", settings.auth.jwt_secret),
            ("AUTH__TELEGRAM_BOT_TOKEN", settings.auth.telegram_bot_token),
        )
        if value == _PLACEHOLDER
    ]
    if placeholders:
        raise ConfigurationError(
            f"Placeholder secrets in production: {', '.join(placeholders)}",
            setting_names=placeholders,
        )


def main() -> int:
    """Start the application and log any startup errors to Logfire."""
    settings = Settings()

    # Configure Logfire early to catch startup errors
    configure_logfire(settings)
    setup_logging(settings)

    try:
        check_secrets(settings)
        logfire.info("Starting FastAPI application")

        uvicorn.run(
            "cabinet.interface.api.app:app",
            host="0.0.0.0",
            port=settings.port,
            log_level="info",
        )

        return 0

    except Exception as e:
        logfire.error(
            "Application startup failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        # Re-raise so the container fails properly
        raise


if __name__ == "__main__":
    sys.exit(main())
