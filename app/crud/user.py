from typing import Optional
from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession
from ..crud.base import CRUDBase
from ..exceptions import raises_unavailable
from ..models.user import User, user_favorites
from ..schemas.user import UserCreate, UserUpdate
from ..services.filters import FilterBuilder

class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    @raises_unavailable
    async def get_by_username(self, db: AsyncSession, *, username: str) -> Optional[User]:
        return await self.find_one(db, FilterBuilder().equals("username", username).build())

    @raises_unavailable
    async def has_favorite(self, db: AsyncSession, *, user_id: int, movie_id: int) -> bool:
        result = await db.execute(
            select(
                exists().where(
                    user_favorites.c.user_id == user_id,
                    user_favorites.c.movie_id == movie_id,
                )
            )
        )
        return bool(result.scalar())

user = CRUDUser(User)
