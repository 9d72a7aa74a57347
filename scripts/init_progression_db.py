"""Create the progression tables (user_progression, user_badges)"""
import asyncio
import logging
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fitcoach.config import validate_config
from fitcoach.db.connection import db
from fitcoach.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


async def main():
    """Validate configuration and create the schema"""
    validate_config()

    logger.info("Initializing database connection...")
    await db.init_pool()
    try:
        await db.create_schema()
    finally:
        await db.close_pool()


if __name__ == "__main__":
    asyncio.run(main())
