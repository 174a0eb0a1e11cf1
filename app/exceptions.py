# app/exceptions.py
"""Catalog error kinds, mapped to JSON error bodies in app.main"""
import asyncio
import functools
import logging

from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base class for errors surfaced to API callers"""
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(CatalogError):
    """Missing movie, category, season, episode or user"""
    status_code = 404
    default_message = "Not found"


class InvalidArgument(CatalogError):
    """Malformed pagination or body input"""
    status_code = 400
    default_message = "Invalid argument"


class Unavailable(CatalogError):
    """Persistence layer unreachable"""
    status_code = 503
    default_message = "Database unavailable"


# Driver and pool failures that mean the database cannot be reached
UNAVAILABLE_ERRORS = (
    OperationalError,
    InterfaceError,
    DisconnectionError,
    ConnectionError,
    asyncio.TimeoutError,
    OSError,
)


def raises_unavailable(func):
    """Re-raise connection failures of an async call as Unavailable"""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except CatalogError:
            raise
        except UNAVAILABLE_ERRORS as e:
            logger.error(f"❌ Database unavailable in {func.__name__}: {e}")
            raise Unavailable() from e

    return wrapper
