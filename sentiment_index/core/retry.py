"""Retry wrapper with exponential backoff for flaky market-data calls."""

import time
from functools import wraps
from typing import Any, Callable, Tuple, Type, TypeVar, cast

from sentiment_index.core.logger import logger

F = TypeVar('F', bound=Callable[..., Any])


def with_retries(
    max_retries: int = 3,
    initial_delay: float = 2,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> Callable[[F], F]:
    """
    Retry the decorated call when it raises one of ``retry_on``.

    Args:
        max_retries (int): Retry attempts after the first call.
        initial_delay (float): Seconds before the first retry; doubles each attempt.
        retry_on (tuple): Exception types that trigger a retry. Anything else
            propagates immediately.

    Returns:
        Callable: The decorated function.
    """
    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = initial_delay
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except retry_on as e:
                    if attempt >= max_retries:
                        logger.error(f"'{func.__name__}' failed after {max_retries} retries: {e}")
                        raise
                    attempt += 1
                    logger.warning(
                        f"'{func.__name__}' failed (attempt {attempt}/{max_retries}): {e}. "
                        f"Retrying in {delay} seconds..."
                    )
                    time.sleep(delay)
                    delay *= 2
        return cast(F, wrapper)
    return decorator
