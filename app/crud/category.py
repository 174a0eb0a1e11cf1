from typing import Iterable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from ..crud.base import CRUDBase
from ..exceptions import raises_unavailable
from ..models.category import Category
from ..schemas.category import CategoryCreate, CategoryUpdate
from ..services.filters import FilterBuilder

class CRUDCategory(CRUDBase[Category, CategoryCreate, CategoryUpdate]):
    @raises_unavailable
    async def get_by_slug(self, db: AsyncSession, *, slug: str) -> Optional[Category]:
        return await self.find_one(db, FilterBuilder().equals("slug", slug).build())

    @raises_unavailable
    async def get_by_name(self, db: AsyncSession, *, name: str) -> Optional[Category]:
        return await self.find_one(db, FilterBuilder().equals("name", name).build())

    @raises_unavailable
    async def find_by_slugs(self, db: AsyncSession, *, slugs: Iterable[str]) -> List[Category]:
        return await self.find(db, FilterBuilder().member_of("slug", slugs).build())

category = CRUDCategory(Category)
