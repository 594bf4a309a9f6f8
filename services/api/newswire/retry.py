from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Type, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from .errors import EnrichmentError, NewswireError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _log_attempt(label: str, attempts: int) -> Callable[[RetryCallState], None]:
    def _inner(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        logger.warning(
            "%s failed (attempt %d/%d): %r",
            label, state.attempt_number, attempts, exc,
        )
    return _inner


async def call_with_retries(
    fn: Callable[[], Awaitable[T]],
    *,
    attempts: int = 3,
    timeout: float = 60.0,
    delay: float = 1.0,
    label: str = "call",
    error_cls: Type[NewswireError] = EnrichmentError,
) -> T:
    """Run `fn` up to `attempts` times.

    Each attempt gets its own `timeout`; when it expires the attempt is
    cancelled. Any exception (HTTP error status included) counts as a failed
    attempt and is followed by a fixed `delay`. After the last attempt the
    final error is raised as `error_cls`, chained to the original.
    """
    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max(1, attempts)),
            wait=wait_fixed(delay),
            retry=retry_if_exception_type(Exception),
            before_sleep=_log_attempt(label, attempts),
            reraise=True,
        ):
            with attempt:
                logger.info("%s attempt %d/%d", label, attempt.retry_state.attempt_number, attempts)
                return await asyncio.wait_for(fn(), timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error("%s timed out after %d attempts", label, attempts)
        raise error_cls(f"{label} timed out after {timeout:.0f}s") from e
    except Exception as e:
        logger.error("%s failed after %d attempts: %r", label, attempts, e)
        raise error_cls(f"{label} failed: {e}") from e
    raise error_cls(f"{label}: max retries reached")
