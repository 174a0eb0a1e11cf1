# app/db/drop.py
"""Drop and recreate all tables (development only)"""
import asyncio
import logging

from ..database import create_all, drop_all

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def recreate_tables():
    """Drop and recreate all tables"""
    logger.info("Recreating all tables...")

    try:
        await drop_all()
        logger.info("Dropped all existing tables")

        await create_all()
        logger.info("✅ Created all tables successfully")

    except Exception as e:
        logger.error(f"Error recreating tables: {e}")
        raise


if __name__ == "__main__":
    asyncio.run(recreate_tables())
