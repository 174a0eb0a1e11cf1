# app/api/v1/users.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from ...crud import user as crud_user
from ...database import get_async_db
from ...exceptions import CatalogError, NotFound
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["users"])


@router.get("", status_code=status.HTTP_200_OK)
async def get_user(name: str, db: AsyncSession = Depends(get_async_db)):
    """Look a user up by username"""
    try:
        user = await crud_user.get_by_username(db, username=name)
        if not user:
            raise NotFound("User not found")

        return {
            "user": user.username,
            "email": user.email,
            "id": user.id,
        }
    except CatalogError:
        raise
    except Exception as e:
        logger.error(f"Error fetching user {name}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch user")
