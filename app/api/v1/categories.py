# app/api/v1/categories.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from ...crud import category as crud_category
from ...database import get_async_db
from ...exceptions import CatalogError, InvalidArgument
from ...models import Category
from ...schemas.category import Category as CategorySchema, CategoryCreate
from ...services.cache import cache_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/categories", tags=["categories"])


def format_category(category: Category) -> dict:
    return CategorySchema.model_validate(category).model_dump(mode="json")


@router.get("", status_code=status.HTTP_200_OK)
async def list_categories(db: AsyncSession = Depends(get_async_db)):
    """Get all categories, sorted by name"""
    try:
        categories = await crud_category.find(db, order_by=(Category.name.asc(),))

        logger.info(f"Found {len(categories)} categories")
        return {
            "success": True,
            "data": [format_category(c) for c in categories],
        }
    except CatalogError:
        raise
    except Exception as e:
        logger.error(f"Error fetching categories: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch categories")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(category_in: CategoryCreate, db: AsyncSession = Depends(get_async_db)):
    """Create new category"""
    try:
        if await crud_category.get_by_slug(db, slug=category_in.slug):
            raise InvalidArgument("Category slug already exists")

        if await crud_category.get_by_name(db, name=category_in.name):
            raise InvalidArgument("Category name already exists")

        category = await crud_category.create(db, obj_in=category_in)
        # listings filtered by this slug were cached as empty
        await cache_service.invalidate_movie_lists()

        logger.info(f"Category created: {category.name}")
        return {"success": True, "data": format_category(category)}

    except CatalogError:
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Error creating category: {e}")
        raise HTTPException(status_code=500, detail="Failed to create category")
