#!/usr/bin/env python3
"""Delete expired link codes, unlink requests and old OTP attempts.

Run periodically (e.g. hourly from cron). Uses the production container, so
the database is configured through the usual environment variables.
"""

import asyncio
import sys

import logfire

from cabinet.config import Settings
from cabinet.domain.service import HousekeepingService
from cabinet.util.di.container import create_container
from cabinet.util.observability import configure_logfire


async def purge() -> None:
    container = create_container()
    try:
        async with container() as request_container:
            service = await request_container.get(HousekeepingService)
            await service.purge_expired()
    finally:
        await container.close()


def main() -> int:
    """Run one purge and log any errors to Logfire."""
    configure_logfire(Settings())

    try:
        asyncio.run(purge())
        return 0

    except Exception as e:
        logfire.error(
            "Linking state purge failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        raise


if __name__ == "__main__":
    sys.exit(main())
