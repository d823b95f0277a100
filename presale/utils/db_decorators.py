"""
Database decorators for automatic error handling and rollback.

Provides decorators to automatically handle database errors and rollbacks
in async functions and service methods that use SQLAlchemy sessions.
"""

from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession


T = TypeVar("T")


def _find_session(args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
    """
    Locate the session for a decorated call.

    Looks at the ``session`` keyword, then a leading AsyncSession
    argument, then the ``session`` attribute of a bound service.
    """
    session = kwargs.get("session")
    if session is not None or not args:
        return session

    if isinstance(args[0], AsyncSession):
        return args[0]

    return getattr(args[0], "session", None)


async def _rollback(session: Any, func_name: str, error: Exception) -> None:
    try:
        await session.rollback()
        logger.info(
            f"Rollback performed in {func_name} due to error: {type(error).__name__}"
        )
    except Exception as rollback_error:
        logger.error(
            f"Failed to rollback in {func_name}: {rollback_error}",
            exc_info=True,
        )


def with_auto_commit(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator that commits the session on success and rolls back on error.

    A decorated operation either fully applies or leaves nothing behind.

    Usage:
        class VestingService:
            @with_auto_commit
            async def claim(self, schedule_id: int, amount: Decimal):
                # No need to call session.commit() - it's automatic
                ...

    Args:
        func: Async function to wrap. The session is taken from the
              'session' keyword, a leading AsyncSession argument or
              the 'session' attribute of the bound instance.

    Returns:
        Wrapped function with automatic commit/rollback
    """
    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        session = _find_session(args, kwargs)

        if session is None:
            logger.warning(
                f"Function {func.__name__} decorated with @with_auto_commit "
                f"but no session argument found. Commit/rollback will not be performed."
            )
            return await func(*args, **kwargs)

        try:
            result = await func(*args, **kwargs)
            await session.commit()
            logger.debug(f"Auto-commit performed in {func.__name__}")
            return result
        except Exception as e:
            await _rollback(session, func.__name__, e)
            raise

    return wrapper
