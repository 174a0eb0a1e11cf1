from fastapi import APIRouter
from . import movies, categories, messages, users

api_router = APIRouter()

api_router.include_router(movies.router, tags=["movies"])
api_router.include_router(categories.router, tags=["categories"])
api_router.include_router(messages.router, tags=["messages"])
api_router.include_router(users.router, tags=["users"])

__all__ = ["api_router"]
