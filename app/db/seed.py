# app/db/seed.py
"""Seed categories, users, movies (with seasons/episodes) and messages"""
import asyncio
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import AsyncSessionLocal, create_all
from ..models import Category, Episode, Message, Movie, Season, User

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Category seed data
CATEGORIES = [
    {"name": "Hành động", "slug": "hanh-dong", "description": "Action"},
    {"name": "Tình cảm", "slug": "tinh-cam", "description": "Romance"},
    {"name": "Hoạt hình", "slug": "hoat-hinh", "description": "Animation"},
    {"name": "Viễn tưởng", "slug": "vien-tuong", "description": "Science fiction"},
    {"name": "Phim bộ", "slug": "phim-bo", "description": "Multi-episode series"},
]

USERS = [
    {"username": "admin", "email": "admin@rapphim.local", "admin": True},
    {"username": "khach", "email": "khach@rapphim.local", "admin": False},
]

# (movie fields, category slugs, episodes per season)
MOVIES = [
    (
        {
            "title": "Hố Đen Tử Thần",
            "english_title": "Interstellar",
            "slug": "interstellar",
            "time": "169 phút",
            "release_year": 2014,
            "rating": 8.7,
            "imdb_id": "tt0816692",
        },
        ["vien-tuong"],
        [1],
    ),
    (
        {
            "title": "Vùng Đất Câm Lặng",
            "english_title": "A Quiet Place",
            "slug": "a-quiet-place",
            "time": "90 phút",
            "release_year": 2018,
            "rating": 7.5,
            "imdb_id": "tt6644200",
        },
        ["hanh-dong"],
        [],
    ),
    (
        {
            "title": "Cậu Bé Người Gỗ",
            "english_title": "Pinocchio",
            "slug": "pinocchio",
            "time": "117 phút",
            "release_year": 2022,
            "rating": 7.6,
            "imdb_id": "tt1488589",
        },
        ["hoat-hinh"],
        [1],
    ),
    (
        {
            "title": "Trò Chơi Con Mực",
            "english_title": "Squid Game",
            "slug": "squid-game",
            "time": "60 phút/tập",
            "release_year": 2021,
            "rating": 8.0,
            "imdb_id": "tt10919420",
        },
        ["phim-bo", "hanh-dong"],
        [9, 7],
    ),
]

MESSAGES = [
    ("admin", "Chào mừng đến với Rạp Phim!"),
    ("khach", "Có phim mới chưa admin?"),
]


async def seed_categories(db: AsyncSession) -> dict:
    """Seed categories into database"""
    logger.info("Seeding categories...")
    by_slug = {}

    for category_data in CATEGORIES:
        result = await db.execute(select(Category).where(Category.slug == category_data["slug"]))
        category = result.scalar_one_or_none()
        if category:
            logger.info(f"Category '{category_data['slug']}' already exists, skipping...")
        else:
            category = Category(**category_data)
            db.add(category)
            logger.info(f"Added category: {category_data['name']}")
        by_slug[category_data["slug"]] = category

    await db.commit()
    logger.info("✅ Categories seeded successfully!")
    return by_slug


async def seed_users(db: AsyncSession) -> dict:
    """Seed users into database"""
    logger.info("Seeding users...")
    by_name = {}

    for user_data in USERS:
        result = await db.execute(select(User).where(User.username == user_data["username"]))
        user = result.scalar_one_or_none()
        if not user:
            user = User(**user_data)
            db.add(user)
            logger.info(f"Added user: {user_data['username']}")
        by_name[user_data["username"]] = user

    await db.commit()
    return by_name


async def seed_movies(db: AsyncSession, categories: dict):
    """Seed movies with their seasons and episodes"""
    logger.info("Seeding movies...")

    for movie_data, category_slugs, season_sizes in MOVIES:
        result = await db.execute(select(Movie).where(Movie.slug == movie_data["slug"]))
        if result.scalar_one_or_none():
            logger.info(f"Movie '{movie_data['slug']}' already exists, skipping...")
            continue

        movie = Movie(**movie_data, view_count=0)
        movie.categories = [categories[slug] for slug in category_slugs]
        movie.seasons = [
            Season(
                number=season_number,
                episodes=[
                    Episode(number=episode_number, title=f"Tập {episode_number}")
                    for episode_number in range(1, size + 1)
                ],
            )
            for season_number, size in enumerate(season_sizes, start=1)
        ]
        db.add(movie)
        logger.info(f"Added movie: {movie_data['english_title']}")

    await db.commit()
    logger.info("✅ Movies seeded successfully!")


async def seed_messages(db: AsyncSession, users: dict):
    """Seed chat messages once"""
    count = await db.execute(select(func.count(Message.id)))
    if count.scalar():
        logger.info("Messages already exist, skipping...")
        return

    for username, body in MESSAGES:
        db.add(Message(author=users[username], body=body))
    await db.commit()


async def main():
    """Main seed function"""
    await create_all()

    async with AsyncSessionLocal() as db:
        try:
            categories = await seed_categories(db)
            users = await seed_users(db)
            await seed_movies(db, categories)
            await seed_messages(db, users)

            total_movies = (await db.execute(select(func.count(Movie.id)))).scalar()
            logger.info(f"✅ Total Movies: {total_movies}")
        except Exception as e:
            logger.error(f"❌ Error seeding data: {e}")
            raise


if __name__ == "__main__":
    asyncio.run(main())
