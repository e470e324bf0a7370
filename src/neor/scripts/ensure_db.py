"""Create (or recreate) the forum tables in the configured database."""

from __future__ import annotations

import argparse
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from neor.core.logging_config import setup_logging
from neor.core.settings import settings
from neor.db.session import create_tables, drop_tables

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create the neor tables for local development")
    parser.add_argument(
        "--drop-tables",
        action="store_true",
        help="Drop every table before creating them again.",
    )
    args = parser.parse_args(argv)

    setup_logging(settings.log_level, settings.log_format)
    try:
        if args.drop_tables:
            drop_tables()
            logger.info("Dropped all tables")
        create_tables()
    except SQLAlchemyError:
        logger.exception("Could not prepare database")
        return 1

    settings.files_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Database ready", extra={"url": settings.effective_database_url})
    return 0


if __name__ == "__main__":
    sys.exit(main())
