import logging

from sqlalchemy import inspect

from app.database import Base
import app.models  # noqa: F401

logger = logging.getLogger(__name__)

CATALOG_TABLES = {
    "categories",
    "movies",
    "movie_categories",
    "seasons",
    "episodes",
    "users",
    "user_favorites",
    "messages",
}


def test_registered_tables():
    registered = set(Base.metadata.tables)
    logger.info(f"🔍 Registered tables: {sorted(registered)}")
    assert registered == CATALOG_TABLES


async def test_table_creation(engine):
    async with engine.connect() as conn:
        db_tables = await conn.run_sync(lambda sync_conn: set(inspect(sync_conn).get_table_names()))

    assert db_tables == CATALOG_TABLES


def test_seasons_survive_movie_deletion():
    (foreign_key,) = Base.metadata.tables["seasons"].c.movie_id.foreign_keys

    assert foreign_key.column.table.name == "movies"
    assert foreign_key.ondelete == "SET NULL"
    assert Base.metadata.tables["seasons"].c.movie_id.nullable
