from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from .errors import RetryError

R = TypeVar("R")


def retry(
    operation: Callable[..., R],
    *args: Any,
    max_retries: int = 3,
    delay_s: float = 0.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Any] = time.sleep,
    **kwargs: Any,
) -> R:
    """Call `operation(*args, **kwargs)` until it returns without raising.

    At most `max_retries` calls are made, with `delay_s` seconds between them
    (never after the last one). Only exceptions in `retry_on` are retried;
    anything else propagates immediately. When every attempt fails, RetryError
    is raised from the last exception.
    """

    if not callable(operation):
        raise TypeError("operation must be callable")
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")
    if delay_s < 0:
        raise ValueError("delay_s must not be negative")

    last_error: BaseException | None = None
    for attempt in range(1, max_retries + 1):
        try:
            return operation(*args, **kwargs)
        except retry_on as e:
            last_error = e
        if attempt < max_retries:
            sleep(delay_s)

    assert last_error is not None
    raise RetryError(max_retries, last_error) from last_error


def retrying(
    max_retries: int = 3,
    delay_s: float = 0.0,
    *,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Any] = time.sleep,
) -> Callable[[Callable[..., R]], Callable[..., R]]:
    """Decorator form of `retry`."""

    def decorator(func: Callable[..., R]) -> Callable[..., R]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> R:
            return retry(
                func,
                *args,
                max_retries=max_retries,
                delay_s=delay_s,
                retry_on=retry_on,
                sleep=sleep,
                **kwargs,
            )

        return wrapper

    return decorator
