"""
Translation of store connectivity failures into StorageUnavailableError.

Every data-access coroutine is wrapped with ``translate_storage_errors``; the
wrapped method must take the AsyncSession as its first argument after self.
Failures are rolled back, logged with the traceback, and re-raised once as
StorageUnavailableError. Nothing here retries.
"""
import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from eventqr.core.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Raised by drivers/pool when the store cannot be reached in time
CONNECTIVITY_ERRORS = (PoolTimeoutError, asyncio.TimeoutError, TimeoutError, ConnectionError)


def is_connectivity_error(exc: BaseException) -> bool:
    if isinstance(exc, (OperationalError, InterfaceError)):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return isinstance(exc, CONNECTIVITY_ERRORS)


async def _rollback_quietly(db: AsyncSession) -> None:
    try:
        await db.rollback()
    except Exception as rollback_error:
        # The connection is already gone; the original failure is what gets reported
        logger.debug(f"Rollback after storage failure also failed: {rollback_error}")


def translate_storage_errors(operation: str):
    """Decorator for StorageService / SessionStore methods"""

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(self: Any, db: AsyncSession, *args: Any, **kwargs: Any) -> T:
            try:
                return await func(self, db, *args, **kwargs)
            except StorageUnavailableError:
                raise
            except Exception as exc:
                if not is_connectivity_error(exc):
                    raise
                await _rollback_quietly(db)
                logger.error(
                    f"Storage unavailable during {operation}: {type(exc).__name__}",
                    exc_info=True,
                    extra={"event_type": "storage_unavailable", "operation": operation},
                )
                raise StorageUnavailableError(operation) from exc

        return wrapper

    return decorator
