import os

# settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.pop("REDIS_URL", None)

from datetime import datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.database import Base, get_async_db, get_session_factory
from app.main import app as fastapi_app
from app.models import Category, Episode, Message, Movie, Season, User

CATEGORIES = [
    ("Hành động", "action"),
    ("Chính kịch", "drama"),
    ("Hài", "comedy"),
]

# slug, title, english title, category slugs, views, episodes per season
MOVIES = [
    ("interstellar", "Hố Đen Tử Thần", "Interstellar", ["drama"], 50, [1]),
    ("a-quiet-place", "Vùng Đất Câm Lặng", "A Quiet Place", ["drama"], 10, []),
    ("pinocchio", "Cậu Bé Người Gỗ", "Pinocchio", ["comedy"], 30, [1]),
    ("squid-game", "Trò Chơi Con Mực", "Squid Game", ["action", "drama"], 80, [9, 7]),
    ("mad-max", "Max Điên", "Mad Max: Fury Road", ["action"], 80, [2]),
    ("dune", "Xứ Cát", "Dune", ["action", "drama"], 5, [0]),
    ("the-batman", "Người Dơi", "The Batman", ["action"], 20, [1]),
]

MESSAGE_COUNT = 12


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}", poolclass=NullPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def catalog(session_factory):
    """Seed the catalog; returns {"movies": {slug: id}, "categories": {...}, "users": {...}}"""
    async with session_factory() as session:
        categories = {}
        for name, slug in CATEGORIES:
            categories[slug] = Category(name=name, slug=slug)
            session.add(categories[slug])

        movies = {}
        for slug, title, english_title, category_slugs, views, seasons in MOVIES:
            movie = Movie(
                slug=slug,
                title=title,
                english_title=english_title,
                view_count=views,
                categories=[categories[s] for s in category_slugs],
            )
            session.add(movie)
            # flush one by one so ids follow creation order
            await session.flush()
            for number, episode_count in enumerate(seasons, start=1):
                session.add(
                    Season(
                        number=number,
                        movie_id=movie.id,
                        episodes=[Episode(number=n) for n in range(1, episode_count + 1)],
                    )
                )
            movies[slug] = movie

        admin = User(username="admin", email="admin@rapphim.local", admin=True)
        admin.favorites = [movies["interstellar"]]
        viewer = User(username="viewer", email="viewer@rapphim.local")
        session.add_all([admin, viewer])
        await session.flush()

        start = datetime(2024, 1, 1, 8, 0, 0)
        for i in range(MESSAGE_COUNT):
            session.add(
                Message(
                    author_id=admin.id if i % 2 else viewer.id,
                    body=f"message {i}",
                    time=start + timedelta(minutes=i),
                )
            )

        await session.commit()

        return {
            "movies": {slug: movie.id for slug, movie in movies.items()},
            "categories": {slug: category.id for slug, category in categories.items()},
            "users": {"admin": admin.id, "viewer": viewer.id},
        }


@pytest.fixture
async def db(session_factory, catalog):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory, catalog):
    async def override_get_async_db():
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_async_db] = override_get_async_db
    fastapi_app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    fastapi_app.dependency_overrides.clear()
