"""
Bounded retry with exponential backoff and jitter.
"""
import random
import time
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

T = TypeVar('T')


def retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    exceptions: tuple = (Exception,),
    on_retry: Optional[Callable[[int, BaseException], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Decorator for retrying functions with exponential backoff and jitter.

    Args:
        max_retries: Maximum number of retry attempts after the first call
        initial_delay: Initial delay in seconds
        max_delay: Maximum delay in seconds
        exponential_base: Base for exponential backoff
        jitter: Whether to add random jitter to delay
        exceptions: Tuple of exceptions to catch and retry
        on_retry: Called with (attempt, exception) before each retry
        sleep: Sleep function, replaceable in tests

    The last exception is re-raised once the retries are used up.
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            delay = initial_delay

            for attempt in range(1, max_retries + 2):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt > max_retries:
                        raise

                    if on_retry is not None:
                        on_retry(attempt, e)

                    actual_delay = delay
                    if jitter:
                        # Add random jitter (0 to 25% of delay)
                        actual_delay += delay * 0.25 * random.random()
                    actual_delay = min(actual_delay, max_delay)

                    if actual_delay > 0:
                        sleep(actual_delay)

                    delay *= exponential_base

            raise AssertionError("unreachable")

        return wrapper
    return decorator
