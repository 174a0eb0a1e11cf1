from app.database import Base
from app.models.movie import Movie, movie_categories
from app.models.category import Category
from app.models.season import Season, Episode
from app.models.user import User, user_favorites
from app.models.message import Message

# This ensures all models are registered with Base.metadata
__all__ = [
    "Base", "Movie", "movie_categories", "Category", "Season",
    "Episode", "User", "user_favorites", "Message",
]
