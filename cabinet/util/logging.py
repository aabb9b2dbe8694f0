"""Standard library logging setup for route modules and scripts."""

import logging
import sys

from cabinet.config import Settings

# Loggers that are noisy at INFO and carry nothing account-related
_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "uvicorn.access")


def resolve_log_level(settings: Settings) -> int:
    """Pick the log level for the current environment.

    Args:
        settings: Application settings

    Returns:
        A ``logging`` level constant
    """
    if settings.debug:
        return logging.DEBUG
    if settings.environment == "test":
        return logging.WARNING
    return logging.INFO


def setup_logging(settings: Settings) -> None:
    """Configure root logging once per process.

    Quiets noisy third-party loggers such as httpx and uvicorn access logs;
    the application itself emits structured events through Logfire.

    Args:
        settings: Application settings
    """
    level = resolve_log_level(settings)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("cabinet").setLevel(level)

    logging.getLogger(__name__).info(
        "Logging configured: environment=%s, level=%s",
        settings.environment,
        logging.getLevelName(level),
    )
