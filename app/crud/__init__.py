from .category import category
from .message import message
from .movie import movie
from .user import user

__all__ = ["category", "message", "movie", "user"]
