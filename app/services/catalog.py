# app/services/catalog.py
"""
Catalog queries: filtered/sorted/paginated movie listings, the
single-episode listing, seasons/episodes lookup and the view counter.

The service is bound to one AsyncSession, handed in by the caller
(see app.api.deps.get_catalog_service).
"""
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..config import settings
from ..crud import category as crud_category
from ..crud import movie as crud_movie
from ..crud import user as crud_user
from ..exceptions import InvalidArgument, NotFound, raises_unavailable
from ..models import Movie, Season, Episode
from .filters import Filter, FilterBuilder

logger = logging.getLogger(__name__)

NAME_FIELDS = ("title", "english_title")

# OFFSET and LIMIT are signed 64-bit on every supported backend
MAX_ROW_OFFSET = 2 ** 63 - 1


def parse_positive_int(value: Any, name: str, default: int) -> int:
    """
    Coerce a loosely-typed paging argument.

    None and "" fall back to `default`. Booleans, fractions, non-numeric
    strings and values below 1 raise InvalidArgument.
    """
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise InvalidArgument(f"{name} must be a positive integer")

    if isinstance(value, int):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    elif isinstance(value, str):
        try:
            number = int(value.strip())
        except ValueError:
            raise InvalidArgument(f"{name} must be a positive integer")
    else:
        raise InvalidArgument(f"{name} must be a positive integer")

    if number < 1:
        raise InvalidArgument(f"{name} must be a positive integer")
    return number


def parse_paging(page: Any, limit: Any) -> Tuple[int, int, int]:
    """Validated (page, limit, skip)"""
    page = parse_positive_int(page, "page", 1)
    limit = parse_positive_int(limit, "limit", settings.DEFAULT_PAGE_SIZE)

    skip = (page - 1) * limit
    if limit > MAX_ROW_OFFSET or skip + limit > MAX_ROW_OFFSET:
        raise InvalidArgument("page and limit are out of range")
    return page, limit, skip


@dataclass
class MovieDetail:
    movie: Movie
    is_favorite: Optional[bool] = None


class CatalogQueryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def build_movie_filter(
        self, category_slugs: Iterable[str] = (), match_name: str = ""
    ) -> Filter:
        """
        Conjunction of the optional category and name predicates.

        Category slugs are resolved to ids first; slugs that match nothing
        are dropped, and if none match the filter selects no movies.
        """
        builder = FilterBuilder()

        slugs = [slug for slug in category_slugs if slug]
        if slugs:
            categories = await crud_category.find_by_slugs(self.db, slugs=slugs)
            builder.intersects("categories", [category.id for category in categories])

        if match_name:
            builder.contains_text(NAME_FIELDS, match_name)

        return builder.build()

    @staticmethod
    def movie_ordering(sort_by_date: bool, sort_by_views: bool, views_first: bool = False):
        by_id = Movie.id.desc() if sort_by_date else Movie.id.asc()
        by_views = Movie.view_count.desc() if sort_by_views else Movie.view_count.asc()
        return (by_views, by_id) if views_first else (by_id, by_views)

    @raises_unavailable
    async def list_movies(
        self,
        page: Any = 1,
        limit: Any = None,
        category_slugs: Iterable[str] = (),
        sort_by_date: bool = True,
        sort_by_views: bool = False,
        match_name: str = "",
        views_first: bool = False,
        populate: bool = False,
    ) -> List[Movie]:
        """
        One page of movies.

        Ordered by id (newest first when sort_by_date), then by view_count;
        `views_first` puts view_count ahead of id. `populate` batch-loads
        each movie's categories.
        """
        page, limit, skip = parse_paging(page, limit)
        flt = await self.build_movie_filter(category_slugs, match_name)

        logger.debug(f"list_movies page={page} limit={limit} filter={flt}")

        return await crud_movie.find(
            self.db,
            flt,
            order_by=self.movie_ordering(sort_by_date, sort_by_views, views_first),
            skip=skip,
            limit=limit,
            options=(selectinload(Movie.categories),) if populate else (),
        )

    @raises_unavailable
    async def list_single_episode_movies(self, page: Any = 1, limit: Any = None) -> List[Movie]:
        """
        Movies with exactly one season that holds exactly one episode,
        newest first.

        The episode count lives on a related table, so candidates with one
        season are fetched first and the episode check runs in memory;
        the page is cut from the filtered list.
        """
        page, limit, skip = parse_paging(page, limit)

        season_count = (
            select(func.count(Season.id))
            .where(Season.movie_id == Movie.id)
            .correlate(Movie)
            .scalar_subquery()
        )
        result = await self.db.execute(
            select(Movie)
            .where(season_count == 1)
            .options(selectinload(Movie.seasons).selectinload(Season.episodes))
            .order_by(Movie.created_at.desc(), Movie.id.desc())
        )
        candidates = result.scalars().all()

        movies = [movie for movie in candidates if movie.is_single_episode]
        return movies[skip:skip + limit]

    @raises_unavailable
    async def increment_view_count(self, movie_id: int) -> int:
        """Add one view to a movie; returns the new count"""
        view_count = await crud_movie.increment_view_count(self.db, movie_id=movie_id)
        if view_count is None:
            raise NotFound("Movie not found")
        return view_count

    @raises_unavailable
    async def get_movie(self, slug: str, user_id: Optional[int] = None) -> MovieDetail:
        movie = await crud_movie.get_by_slug(
            self.db, slug=slug, options=(selectinload(Movie.categories),)
        )
        if not movie:
            raise NotFound("Movie not found")

        detail = MovieDetail(movie=movie)
        if user_id is not None:
            user = await crud_user.find_by_id(self.db, user_id)
            if not user:
                raise NotFound("User not found")
            detail.is_favorite = await crud_user.has_favorite(
                self.db, user_id=user.id, movie_id=movie.id
            )
        return detail

    @raises_unavailable
    async def get_season(self, slug: str, season_number: int) -> Tuple[Movie, Season]:
        movie = await crud_movie.get_with_episodes(self.db, slug=slug)
        if not movie:
            raise NotFound("Movie not found")

        season = next((s for s in movie.seasons if s.number == season_number), None)
        if not season:
            raise NotFound("Season not found")
        return movie, season

    async def get_episode(
        self, slug: str, season_number: int, episode_number: int
    ) -> Tuple[Movie, Season, Episode]:
        movie, season = await self.get_season(slug, season_number)

        episode = next((e for e in season.episodes if e.number == episode_number), None)
        if not episode:
            raise NotFound("Episode not found")
        return movie, season, episode

    @raises_unavailable
    async def list_movies_by_category(self, slug: str, page: Any = 1, limit: Any = None) -> List[Movie]:
        category = await crud_category.get_by_slug(self.db, slug=slug)
        if not category:
            raise NotFound("Category not found")

        return await self.list_movies(page=page, limit=limit, category_slugs=[slug], populate=True)
