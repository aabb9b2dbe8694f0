"""Observability configuration using Logfire.

Domain services trace their work directly:

    import logfire

    with logfire.span("link_code_service.confirm", requester_id=str(account_id)):
        logfire.info("Link code claimed", link_code_id=str(link_code.id))

Secrets (link codes, OTPs, request tokens, full provider user ids) are never
passed as span attributes.
"""

import logfire
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from cabinet.config import Settings

SERVICE_NAME = "cabinet-linking"

# Headers that carry credentials and must not be captured on request spans
_SCRUBBED_HEADERS = ("authorization", "cookie")


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire for the current environment.

    Cloud sending is enabled explicitly via OBSERVABILITY__SEND_TO_LOGFIRE or
    implicitly when OBSERVABILITY__LOGFIRE_TOKEN is set; otherwise events only
    go to the console.

    Args:
        settings: Application settings
    """
    if settings.observability.send_to_logfire is not None:
        send_to_logfire = settings.observability.send_to_logfire
    else:
        send_to_logfire = bool(settings.observability.logfire_token)

    config_kwargs = {
        "service_name": SERVICE_NAME,
        "service_version": settings.git_sha,
        "environment": settings.environment,
        "send_to_logfire": send_to_logfire,
        "console": logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
        "scrubbing": logfire.ScrubbingOptions(
            extra_patterns=["otp", "request_token", "link_code_value"]
        ),
    }

    if settings.observability.logfire_token:
        config_kwargs["token"] = settings.observability.logfire_token

    logfire.configure(**config_kwargs)

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
    )


def instrument_fastapi(app: FastAPI) -> None:
    """Trace every HTTP request handled by the cabinet API.

    Args:
        app: FastAPI application instance
    """

    def _map_request_attributes(request, attributes):
        result = {
            key: value
            for key, value in attributes.items()
            if key.lower() not in _SCRUBBED_HEADERS
        }
        if hasattr(request, "method"):
            result["method"] = request.method
        if hasattr(request, "url"):
            result["path"] = request.url.path
        return result

    logfire.instrument_fastapi(
        app,
        capture_headers=False,
        request_attributes_mapper=_map_request_attributes,
    )


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Trace SQL statements issued through the async engine.

    Args:
        engine: SQLAlchemy async engine
    """
    logfire.instrument_sqlalchemy(engine=engine.sync_engine)


def instrument_httpx() -> None:
    """Trace outbound calls to Telegram, the email relay and OAuth providers."""
    logfire.instrument_httpx()
