from typing import Optional, List
from urllib.parse import urlencode
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, status
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from ...config import settings
from ...crud import movie as crud_movie
from ...database import get_async_db, get_session_factory
from ...exceptions import CatalogError, InvalidArgument, NotFound
from ...models import Movie, Season, Episode
from ...schemas.movie import MovieCreate, MovieUpdate
from ...schemas.season import Episode as EpisodeSchema
from ...services.cache import cache_service
from ...services.catalog import CatalogQueryService, parse_paging
from ..deps import get_catalog_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/movies", tags=["movies"])


# ==================== HELPER FUNCTIONS ====================

def _is_loaded(obj, attr: str) -> bool:
    return attr not in inspect(obj).unloaded


def format_episode(episode: Episode) -> dict:
    return EpisodeSchema.model_validate(episode).model_dump()


def format_season(season: Season) -> dict:
    data = {
        "id": season.id,
        "movie_id": season.movie_id,
        "number": season.number,
        "title": season.title,
    }
    if _is_loaded(season, "episodes"):
        data["episodes"] = [format_episode(e) for e in season.episodes]
    return data


def format_movie(movie: Movie) -> dict:
    """Movie as JSON; relations are included only when they were resolved"""
    data = {
        "id": movie.id,
        "title": movie.title,
        "english_title": movie.english_title,
        "slug": movie.slug,
        "image": movie.image,
        "time": movie.time,
        "trailer": movie.trailer,
        "premiere": movie.premiere,
        "description": movie.description,
        "release_year": movie.release_year,
        "rating": movie.rating,
        "imdb_id": movie.imdb_id,
        "view_count": movie.view_count,
        "created_at": movie.created_at.isoformat() if movie.created_at else None,
        "updated_at": movie.updated_at.isoformat() if movie.updated_at else None,
    }
    if _is_loaded(movie, "categories"):
        data["categories"] = [
            {"id": c.id, "name": c.name, "slug": c.slug} for c in movie.categories
        ]
    if _is_loaded(movie, "seasons"):
        data["seasons"] = [format_season(s) for s in movie.seasons]
    return data


def next_page_url(request: Request, path: str, **params) -> str:
    base = str(request.base_url).rstrip("/")
    return f"{base}{settings.API_PREFIX}{path}?{urlencode(params)}"


def page_envelope(data: List[dict], page: int, next_page: str) -> dict:
    return {
        "success": True,
        "data": data,
        "page": page,
        "length": len(data),
        "nextPage": next_page,
    }


def split_slugs(values: Optional[List[str]]) -> List[str]:
    """Accept both repeated `categorySlugs` params and comma-separated values"""
    slugs = []
    for value in values or []:
        slugs.extend(part.strip() for part in value.split(",") if part.strip())
    return slugs


async def record_movie_view(session_factory: async_sessionmaker, movie_id: int):
    """Fire-and-forget view increment, runs after the response in its own session"""
    async with session_factory() as session:
        try:
            view_count = await CatalogQueryService(session).increment_view_count(movie_id)
            logger.debug(f"View tracked for movie {movie_id} (Total views: {view_count})")
        except CatalogError as e:
            logger.warning(f"⚠️ Could not track view for movie {movie_id}: {e.message}")


# ==================== LISTINGS ====================

@router.get("", status_code=status.HTTP_200_OK)
async def list_movies(
    request: Request,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    match_name: str = Query("", alias="matchName"),
    category_slugs: Optional[List[str]] = Query(None, alias="categorySlugs"),
    populate: bool = False,
    service: CatalogQueryService = Depends(get_catalog_service),
):
    """Newest movies, optionally filtered by category slugs and name"""
    try:
        page_number, page_size, _ = parse_paging(page, limit)
        slugs = split_slugs(category_slugs)

        cache_key = cache_service.movie_list_key(
            "new", page=page_number, limit=page_size, match=match_name,
            categories=slugs, populate=populate,
        )
        data = await cache_service.get_movie_list(cache_key)
        if data is None:
            movies = await service.list_movies(
                page=page_number,
                limit=page_size,
                match_name=match_name,
                category_slugs=slugs,
                populate=populate,
            )
            data = [format_movie(m) for m in movies]
            await cache_service.set_movie_list(cache_key, data)
        else:
            logger.info("✅ Cache hit for movie list")

        return page_envelope(
            data,
            page_number,
            next_page_url(request, "/movies", page=page_number + 1, limit=page_size, matchName=match_name),
        )
    except CatalogError:
        raise
    except Exception as e:
        logger.error(f"Error fetching movies: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch movies")


@router.get("/top", status_code=status.HTTP_200_OK)
async def list_top_movies(
    request: Request,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    service: CatalogQueryService = Depends(get_catalog_service),
):
    """Most viewed movies"""
    try:
        page_number, page_size, _ = parse_paging(page, limit)

        cache_key = cache_service.movie_list_key("top", page=page_number, limit=page_size)
        data = await cache_service.get_movie_list(cache_key)
        if data is None:
            movies = await service.list_movies(
                page=page_number,
                limit=page_size,
                sort_by_date=False,
                sort_by_views=True,
                views_first=True,
            )
            data = [format_movie(m) for m in movies]
            await cache_service.set_movie_list(cache_key, data)

        return page_envelope(
            data,
            page_number,
            next_page_url(request, "/movies/top", page=page_number + 1, limit=page_size),
        )
    except CatalogError:
        raise
    except Exception as e:
        logger.error(f"Error fetching top movies: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch top movies")


@router.get("/single-episode", status_code=status.HTTP_200_OK)
async def list_single_episode_movies(
    request: Request,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    service: CatalogQueryService = Depends(get_catalog_service),
):
    """Movies made of one season with one episode"""
    try:
        page_number, page_size, _ = parse_paging(page, limit)
        movies = await service.list_single_episode_movies(page=page_number, limit=page_size)

        return page_envelope(
            [format_movie(m) for m in movies],
            page_number,
            next_page_url(request, "/movies/single-episode", page=page_number + 1, limit=page_size),
        )
    except CatalogError:
        raise
    except Exception as e:
        logger.error(f"Error fetching single-episode movies: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch movies")


@router.get("/category/{slug}", status_code=status.HTTP_200_OK)
async def list_movies_by_category(
    slug: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    service: CatalogQueryService = Depends(get_catalog_service),
):
    """Movies of one category, with their categories resolved"""
    try:
        movies = await service.list_movies_by_category(slug, page=page, limit=limit)
        return {"success": True, "data": [format_movie(m) for m in movies]}
    except CatalogError:
        raise
    except Exception as e:
        logger.error(f"Error fetching movies for category {slug}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch movies")


# ==================== SINGLE MOVIE / SEASON / EPISODE ====================

@router.get("/{slug}")
async def get_movie(
    slug: str,
    background_tasks: BackgroundTasks,
    user_id: Optional[int] = None,
    service: CatalogQueryService = Depends(get_catalog_service),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Single movie by slug; counts a view once the response is sent"""
    try:
        detail = await service.get_movie(slug, user_id=user_id)
        background_tasks.add_task(record_movie_view, session_factory, detail.movie.id)

        return {
            "success": True,
            "data": format_movie(detail.movie),
            "isFavorite": detail.is_favorite,
        }
    except CatalogError:
        raise
    except Exception as e:
        logger.error(f"Error fetching movie {slug}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch movie")


@router.get("/{slug}/seasons/{season_number}")
async def get_season(
    slug: str,
    season_number: int,
    service: CatalogQueryService = Depends(get_catalog_service),
):
    try:
        movie, season = await service.get_season(slug, season_number)
        return {
            "success": True,
            "data": {
                "movie": {"id": movie.id, "title": movie.title, "slug": movie.slug},
                "season": format_season(season),
            },
        }
    except CatalogError:
        raise
    except Exception as e:
        logger.error(f"Error fetching season {season_number} of {slug}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch season")


@router.get("/{slug}/seasons/{season_number}/episodes/{episode_number}")
async def get_episode(
    slug: str,
    season_number: int,
    episode_number: int,
    service: CatalogQueryService = Depends(get_catalog_service),
):
    try:
        movie, season, episode = await service.get_episode(slug, season_number, episode_number)
        return {
            "success": True,
            "data": {
                "movie": {"id": movie.id, "title": movie.title, "slug": movie.slug},
                "season": {"id": season.id, "number": season.number, "title": season.title},
                "episode": format_episode(episode),
            },
        }
    except CatalogError:
        raise
    except Exception as e:
        logger.error(
            f"Error fetching episode {episode_number} of {slug} season {season_number}: {e}",
            exc_info=True,
        )
        raise HTTPException(status_code=500, detail="Failed to fetch episode")


# ==================== CRUD ====================

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_movie(movie_in: MovieCreate, db: AsyncSession = Depends(get_async_db)):
    """Create new movie"""
    try:
        existing = await crud_movie.get_by_slug(db, slug=movie_in.slug)
        if existing:
            raise InvalidArgument("Movie slug already exists")

        movie = await crud_movie.create(db, obj_in=movie_in)
        await cache_service.invalidate_movie_lists()

        logger.info(f"✅ Movie created: {movie.title} (ID: {movie.id})")
        return {"success": True, "data": format_movie(movie)}

    except CatalogError:
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"❌ Error creating movie: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create movie")


@router.put("/{movie_id}")
async def update_movie(
    movie_id: int,
    movie_in: MovieUpdate,
    db: AsyncSession = Depends(get_async_db),
):
    """Update movie fields; omitted fields are left unchanged"""
    try:
        if movie_in.slug is not None:
            existing = await crud_movie.get_by_slug(db, slug=movie_in.slug)
            if existing and existing.id != movie_id:
                raise InvalidArgument("Movie slug already exists")

        movie = await crud_movie.find_by_id_and_update(db, movie_id, obj_in=movie_in)
        if not movie:
            raise NotFound("Movie not found")
        await cache_service.invalidate_movie_lists()

        logger.info(f"✅ Movie updated: {movie.title}")
        return {"success": True, "data": format_movie(movie)}

    except CatalogError:
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"❌ Error updating movie {movie_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update movie")


@router.delete("/{movie_id}")
async def delete_movie(movie_id: int, db: AsyncSession = Depends(get_async_db)):
    """Permanently delete a movie; its seasons are kept"""
    try:
        movie = await crud_movie.find_by_id_and_delete(db, movie_id)
        if not movie:
            raise NotFound("Movie not found")
        await cache_service.invalidate_movie_lists()

        logger.info(f"✅ Movie deleted: {movie.title}")
        return {"success": True, "data": format_movie(movie)}

    except CatalogError:
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"❌ Error deleting movie {movie_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete movie")
