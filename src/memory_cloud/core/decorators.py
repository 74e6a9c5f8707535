"""Error handling decorators"""

import inspect
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar, cast

from .base import ApplicationError, ErrorLevel
from .error_context import ErrorContextManager
from .logging import get_logger

logger = get_logger(__name__)
P = ParamSpec("P")
T = TypeVar("T")


def _log_failure(func_name: str, error: Exception, level: ErrorLevel, error_context: dict[str, Any]) -> None:
    logger.log(
        level.to_logging_level(),
        f"Error in {func_name}: {error!s}",
        extra=error_context,
        exc_info=level in (ErrorLevel.ERROR, ErrorLevel.CRITICAL),
    )


def with_error_handling(
    error_level: ErrorLevel = ErrorLevel.ERROR,
    reraise: bool = True,
    default: Any = None,
    passthrough: tuple[type[Exception], ...] = (),
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator for handling errors in functions.

    ApplicationErrors are logged at their own level; anything else at
    `error_level`. Exceptions listed in `passthrough` are re-raised untouched
    even when `reraise` is False, so a caller can still react to them.

    Args:
        error_level: Severity level for unexpected errors
        reraise: Whether to re-raise the error after handling
        default: Value returned when the error is swallowed
        passthrough: Exception types that always propagate

    Returns:
        Decorated function with error handling
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        original_signature = inspect.signature(func)

        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
                try:
                    return await cast("Callable[P, Awaitable[T]]", func)(*args, **kwargs)
                except passthrough:
                    raise
                except Exception as e:
                    level = e.level if isinstance(e, ApplicationError) else error_level
                    async with ErrorContextManager(e, function=func.__name__) as ctx:
                        _log_failure(func.__name__, e, level, ctx.to_dict())
                    if reraise:
                        raise
                    return cast("T", default)

            async_wrapper.__signature__ = original_signature  # type: ignore
            return cast("Callable[P, T]", async_wrapper)

        @wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except passthrough:
                raise
            except Exception as e:
                level = e.level if isinstance(e, ApplicationError) else error_level
                with ErrorContextManager(e, function=func.__name__) as ctx:
                    _log_failure(func.__name__, e, level, ctx.to_dict())
                if reraise:
                    raise
                return cast("T", default)

        sync_wrapper.__signature__ = original_signature  # type: ignore
        return sync_wrapper

    return decorator
