"""Timing decorator and scoped log context."""

import functools
import inspect
import logging
import time
from collections.abc import Callable
from typing import Any, ParamSpec, TypeVar, overload

from videotube.commons.telemetry.logger import (
    get_log_context,
    get_logger,
    log_context_var,
)

P = ParamSpec("P")
R = TypeVar("R")


@overload
def timed(
    func: Callable[P, R],
) -> Callable[P, R]: ...


@overload
def timed(
    *,
    logger: logging.Logger | None = None,
    level: int = logging.DEBUG,
    threshold_ms: float | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]: ...


def timed(
    func: Callable[P, R] | None = None,
    *,
    logger: logging.Logger | None = None,
    level: int = logging.DEBUG,
    threshold_ms: float | None = None,
) -> Callable[P, R] | Callable[[Callable[P, R]], Callable[P, R]]:
    """Log how long the wrapped function took.

    Works on both plain and ``async`` functions, with or without arguments:

        @timed
        async def probe(...): ...

        @timed(level=logging.INFO, threshold_ms=500)
        def slow(...): ...

    Args:
        func: Function being decorated when used bare.
        logger: Logger to write to. Defaults to the function's module logger.
        level: Level of the timing message.
        threshold_ms: Only log when the call took at least this long.
    """

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        log = logger or get_logger(fn.__module__)

        def _report(started: float) -> None:
            elapsed_ms = (time.perf_counter() - started) * 1000
            if threshold_ms is None or elapsed_ms >= threshold_ms:
                log.log(
                    level,
                    f"{fn.__qualname__} completed",
                    extra={"duration_ms": round(elapsed_ms, 2)},
                )

        if inspect.iscoroutinefunction(fn):

            @functools.wraps(fn)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
                started = time.perf_counter()
                try:
                    return await fn(*args, **kwargs)  # type: ignore[no-any-return,misc]
                finally:
                    _report(started)

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(fn)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            started = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                _report(started)

        return sync_wrapper

    if func is not None:
        return decorator(func)
    return decorator


class LogContext:
    """Context manager that adds fields to every log line inside its block."""

    def __init__(self, **kwargs: Any) -> None:
        self.context = kwargs
        self._previous_context: dict[str, Any] = {}

    def __enter__(self) -> "LogContext":
        self._previous_context = get_log_context()
        log_context_var.set({**self._previous_context, **self.context})
        return self

    def __exit__(self, *args: Any) -> None:
        log_context_var.set(self._previous_context)
