"""Create the content tables in the configured database."""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.exc import SQLAlchemyError

from media_autowriter.config.settings import settings
from media_autowriter.database import models  # noqa: F401  (registers tables on Base.metadata)
from media_autowriter.database.db_session import Base, engine
from media_autowriter.utils.logging import get_logger, setup_logging


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


def main() -> None:
    """Create every table that does not exist yet."""
    setup_logging()
    logger = get_logger(__name__)

    try:
        asyncio.run(create_tables())
        logger.info(
            "tables_created",
            tables=sorted(Base.metadata.tables),
            database=f"{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}",
        )
        print(f"Created tables: {', '.join(sorted(Base.metadata.tables))}")
    except SQLAlchemyError as e:
        logger.error("Failed to create tables", error=str(e))
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
