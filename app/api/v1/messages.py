# app/api/v1/messages.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from ...config import settings
from ...crud import message as crud_message
from ...database import get_async_db
from ...exceptions import CatalogError, InvalidArgument
from ...services.catalog import MAX_ROW_OFFSET
from ...schemas.message import Message as MessageSchema
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/messages", tags=["messages"])


def parse_skip(value: Optional[str]) -> int:
    if value is None or value == "":
        return 0
    try:
        skip = int(value.strip())
    except ValueError:
        raise InvalidArgument("skip must be a non-negative integer")
    if skip < 0:
        raise InvalidArgument("skip must be a non-negative integer")
    if skip + settings.MESSAGES_PAGE_SIZE > MAX_ROW_OFFSET:
        raise InvalidArgument("skip is out of range")
    return skip


@router.get("", status_code=status.HTTP_200_OK)
async def list_messages(skip: Optional[str] = None, db: AsyncSession = Depends(get_async_db)):
    """Newest messages first, with author name, avatar and admin flag"""
    try:
        messages = await crud_message.list_recent(
            db, skip=parse_skip(skip), limit=settings.MESSAGES_PAGE_SIZE
        )
        return {
            "success": True,
            "messages": [
                MessageSchema.model_validate(m).model_dump(mode="json") for m in messages
            ],
        }
    except CatalogError:
        raise
    except Exception as e:
        logger.error(f"Error fetching messages: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch messages")
