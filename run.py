import asyncio
import logging
import sys

from utils.logging_config import setup_logging

# Initialize centralized logging configuration
setup_logging()

from db import create_db_and_tables, get_db_session, check_storage_health


async def main() -> int:
    """
    Prepare the storage layer for the marketplace core.

    Creates missing tables and verifies the database answers. Returns a
    process exit code so deployment scripts can gate on it.
    """
    await create_db_and_tables()
    async with get_db_session() as session:
        health = await check_storage_health(session)

    if health['status'] != 'healthy':
        logging.critical(f"❌ Storage unhealthy: {health['message']}")
        return 1
    logging.info(f"✅ Storage ready: {health['message']}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
