"""Retry utilities with tenacity for I/O operations."""

import asyncio
from functools import wraps
from typing import Any, Callable, Optional, Tuple, Type, TypeVar

from sqlalchemy.exc import DisconnectionError, OperationalError
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from media_autowriter.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_MIN_WAIT_SECONDS = 1
DEFAULT_MAX_WAIT_SECONDS = 60

# Transient connection failures only; query errors and missing rows are never retried
DATABASE_EXCEPTIONS: Tuple[Type[Exception], ...] = (
    ConnectionError,
    TimeoutError,
    asyncio.TimeoutError,
    OperationalError,
    DisconnectionError,
)


def _log_before_sleep(retry_state: Any) -> None:
    """Log each retry through structlog (tenacity's helper expects a stdlib logger)."""
    outcome = retry_state.outcome
    logger.warning(
        "retrying_operation",
        operation=getattr(retry_state.fn, "__qualname__", "database_read"),
        attempt=retry_state.attempt_number,
        error=str(outcome.exception()) if outcome is not None else None,
    )


def async_retry_with_backoff(
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    min_wait: float = DEFAULT_MIN_WAIT_SECONDS,
    max_wait: float = DEFAULT_MAX_WAIT_SECONDS,
    retry_exceptions: Optional[Tuple[Type[Exception], ...]] = None,
    log_retry: bool = True,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator for async functions with exponential backoff retry.

    Args:
        max_attempts: Maximum number of attempts (default: 3)
        min_wait: Minimum wait time between retries in seconds (default: 1)
        max_wait: Maximum wait time between retries in seconds (default: 60)
        retry_exceptions: Tuple of exception types to retry on (default: database exceptions)
        log_retry: Whether to log retry attempts (default: True)

    Returns:
        Decorated async function with retry logic
    """
    if retry_exceptions is None:
        retry_exceptions = DATABASE_EXCEPTIONS

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(max_attempts),
                wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
                retry=retry_if_exception_type(retry_exceptions),
                before_sleep=_log_before_sleep if log_retry else None,
                reraise=True,
            ):
                with attempt:
                    return await func(*args, **kwargs)
            # This should never be reached due to reraise=True
            raise RetryError(f"Failed after {max_attempts} attempts")

        return wrapper  # type: ignore

    return decorator


def retry_database_operation(
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator for idempotent database reads.

    Args:
        max_attempts: Maximum attempts (default: 3)
    """
    return async_retry_with_backoff(
        max_attempts=max_attempts,
        min_wait=0.5,
        max_wait=10,
        retry_exceptions=DATABASE_EXCEPTIONS,
    )
