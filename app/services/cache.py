from typing import Any, Optional
from urllib.parse import urlencode
from ..config import settings
from ..redis_client import redis_client

MOVIE_LIST_PREFIX = "movies:list"


class CacheService:
    def __init__(self, client=None):
        self.redis = client or redis_client

    @staticmethod
    def movie_list_key(kind: str, **params: Any) -> str:
        """Stable key for one listing page; params are sorted so order never matters"""
        normalized = sorted(
            (name, ",".join(sorted(value)) if isinstance(value, (list, tuple)) else value)
            for name, value in params.items()
        )
        return f"{MOVIE_LIST_PREFIX}:{kind}:{urlencode(normalized)}"

    async def get_movie_list(self, key: str) -> Optional[dict]:
        """Get cached movie listing"""
        return await self.redis.get(key)

    async def set_movie_list(self, key: str, payload: dict, expire: Optional[int] = None) -> bool:
        """Cache movie listing"""
        return await self.redis.set(key, payload, expire or settings.MOVIE_LIST_CACHE_SECONDS)

    async def invalidate_movie_lists(self) -> int:
        """Drop every cached movie listing"""
        keys = await self.redis.keys(f"{MOVIE_LIST_PREFIX}:*")
        return await self.redis.delete(*keys)

cache_service = CacheService()
