#!/usr/bin/env python3
"""Apply the account linking schema with Logfire error tracking.

Usage:
    python scripts/run_migrations.py            # upgrade to head
    python scripts/run_migrations.py <revision>  # upgrade or downgrade to revision
"""

import argparse
import sys

import logfire
from alembic import command
from alembic.config import Config

from cabinet.config import Settings
from cabinet.util.observability import configure_logfire


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("revision", nargs="?", default="head")
    parser.add_argument(
        "--downgrade", action="store_true", help="Downgrade to the revision"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Migrate the database and log any errors to Logfire."""
    args = parse_args(sys.argv[1:] if argv is None else argv)
    settings = Settings()
    configure_logfire(settings)

    alembic_cfg = Config("alembic.ini")

    with logfire.span(
        "run_migrations", revision=args.revision, downgrade=args.downgrade
    ):
        try:
            if args.downgrade:
                command.downgrade(alembic_cfg, args.revision)
            else:
                command.upgrade(alembic_cfg, args.revision)
        except Exception as e:
            logfire.error(
                "Database migration failed",
                error=str(e),
                error_type=type(e).__name__,
                _exc_info=sys.exc_info(),
            )
            # The service must not start against a half-migrated schema
            raise

    logfire.info("Database migrations completed", revision=args.revision)
    return 0


if __name__ == "__main__":
    sys.exit(main())
