"""HTTP client utilities and helpers."""

from asyncio import sleep
from collections.abc import Awaitable, Callable
from functools import wraps

from typing import Any, ParamSpec, TypeVar

import httpx

from src.helpers.constants import (
    CONNECTION_TIMEOUT,
    DEFAULT_TIMEOUT,
    MAX_CONNECTIONS,
    MAX_KEEPALIVE_CONNECTIONS,
    MAX_RETRIES,
    RETRY_BASE_DELAY,
    RETRY_MAX_DELAY,
)
from src.helpers.logging import get_logger


logger = get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


def retry_with_backoff(
    max_retries: int = MAX_RETRIES,
    base_delay: float = RETRY_BASE_DELAY,
    max_delay: float = RETRY_MAX_DELAY,
    *,
    retry_on: tuple[type[BaseException], ...] = (httpx.HTTPError,),
    log_errors: bool = True,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator to retry async functions with exponential backoff.

    Only exceptions listed in ``retry_on`` are retried; anything else
    propagates from the first attempt untouched.

    Args:
        max_retries: Maximum number of attempts (default: 3)
        base_delay: Initial delay in seconds (default: 1.0)
        max_delay: Maximum delay between retries (default: 60.0)
        retry_on: Exception types that trigger another attempt
        log_errors: Whether to log retry attempts (default: True)

    Returns:
        Decorated function that retries on the given exception types

    Example:
        ```python
        from src.helpers.http import retry_with_backoff

        @retry_with_backoff(max_retries=3, base_delay=2.0)
        async def fetch_data(client: httpx.AsyncClient, url: str) -> dict:
            response = await client.get(url)
            response.raise_for_status()
            return response.json()

        # Will try up to 3 times, sleeping 2s then 4s in between
        ```
    """
    if max_retries < 1:
        msg = f"max_retries must be at least 1, got {max_retries}"
        raise ValueError(msg)

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            for attempt in range(max_retries):
                try:
                    return await func(*args, **kwargs)
                except retry_on as e:
                    if attempt == max_retries - 1:
                        if log_errors:
                            logger.error(
                                "%s failed after %d attempts: %s",
                                func.__name__,
                                max_retries,
                                e,
                            )
                        raise
                    if log_errors:
                        logger.warning(
                            "%s %s (attempt %d/%d): %s",
                            func.__name__,
                            "timeout"
                            if isinstance(e, httpx.TimeoutException)
                            else "error",
                            attempt + 1,
                            max_retries,
                            e,
                        )

                # Exponential backoff with max_delay cap
                delay = min(base_delay * (2**attempt), max_delay)
                await sleep(delay)

            # Unreachable while max_retries >= 1, but satisfies the type checker
            msg = f"{func.__name__} failed without exception"
            raise RuntimeError(msg)

        return wrapper

    return decorator


def create_http_client(
    timeout: float = DEFAULT_TIMEOUT, **kwargs: Any
) -> httpx.AsyncClient:
    """Create a configured httpx AsyncClient.

    Args:
        timeout: Default timeout in seconds (default: DEFAULT_TIMEOUT)
        **kwargs: Additional httpx.AsyncClient kwargs

    Returns:
        Configured AsyncClient instance with pooled connections

    Example:
        ```python
        from src.helpers.http import create_http_client

        async with create_http_client(timeout=60.0) as client:
            response = await client.post(rpc_url, json=payload)
        ```
    """
    kwargs.setdefault(
        "limits",
        httpx.Limits(
            max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
            max_connections=MAX_CONNECTIONS,
        ),
    )
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout, connect=min(timeout, CONNECTION_TIMEOUT)),
        **kwargs,
    )


__all__ = [
    "create_http_client",
    "retry_with_backoff",
]
