# app/api/deps.py
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from ..database import get_async_db
from ..services.catalog import CatalogQueryService


def get_catalog_service(db: AsyncSession = Depends(get_async_db)) -> CatalogQueryService:
    """Catalog service bound to the request's session"""
    return CatalogQueryService(db)
