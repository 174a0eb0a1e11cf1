from typing import List, Optional
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from ..crud.base import CRUDBase
from ..exceptions import raises_unavailable
from ..models.category import Category
from ..models.movie import Movie
from ..models.season import Season
from ..schemas.movie import MovieCreate, MovieUpdate
from ..services.filters import FilterBuilder

class CRUDMovie(CRUDBase[Movie, MovieCreate, MovieUpdate]):
    @raises_unavailable
    async def get_by_slug(
        self, db: AsyncSession, *, slug: str, options=()
    ) -> Optional[Movie]:
        return await self.find_one(db, FilterBuilder().equals("slug", slug).build(), options=options)

    @raises_unavailable
    async def get_with_episodes(self, db: AsyncSession, *, slug: str) -> Optional[Movie]:
        return await self.get_by_slug(
            db,
            slug=slug,
            options=(selectinload(Movie.seasons).selectinload(Season.episodes),),
        )

    async def _resolve_categories(self, db: AsyncSession, category_ids: List[int]) -> List[Category]:
        if not category_ids:
            return []
        result = await db.execute(select(Category).where(Category.id.in_(category_ids)))
        return list(result.scalars().all())

    @raises_unavailable
    async def create(self, db: AsyncSession, *, obj_in: MovieCreate) -> Movie:
        fields = obj_in.model_dump(exclude={"category_ids"})
        movie = Movie(**fields, view_count=0)
        movie.categories = await self._resolve_categories(db, obj_in.category_ids)
        db.add(movie)
        await db.commit()
        return await self.find_by_id(db, movie.id, options=(selectinload(Movie.categories),), fresh=True)

    @raises_unavailable
    async def find_by_id_and_update(
        self, db: AsyncSession, id: int, *, obj_in: MovieUpdate
    ) -> Optional[Movie]:
        movie = await self.find_by_id(db, id, options=(selectinload(Movie.categories),))
        if movie is None:
            return None

        fields = obj_in.model_dump(exclude_unset=True)
        category_ids = fields.pop("category_ids", None)
        for name, value in fields.items():
            setattr(movie, name, value)
        if category_ids is not None:
            movie.categories = await self._resolve_categories(db, category_ids)

        await db.commit()
        return await self.find_by_id(db, id, options=(selectinload(Movie.categories),), fresh=True)

    @raises_unavailable
    async def find_by_id_and_delete(self, db: AsyncSession, id: int) -> Optional[Movie]:
        movie = await self.find_by_id(
            db, id, options=(selectinload(Movie.categories), selectinload(Movie.seasons))
        )
        if movie is None:
            return None

        await db.delete(movie)
        await db.commit()
        return movie

    @raises_unavailable
    async def increment_view_count(self, db: AsyncSession, *, movie_id: int) -> Optional[int]:
        """Atomically add one view; returns the new count or None if no such movie"""
        result = await db.execute(
            update(Movie)
            .where(Movie.id == movie_id)
            .values(view_count=Movie.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            return None
        await db.commit()

        count = await db.execute(select(Movie.view_count).where(Movie.id == movie_id))
        return count.scalar_one()

movie = CRUDMovie(Movie)
