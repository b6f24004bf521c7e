"""BackoffPolicy — exponential backoff between a min and max wait."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, TypeVar

from .config import MAX_WAIT_MS, MIN_WAIT_MS

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterator

logger = logging.getLogger("cqrs_ddd.simpledb.client")

T = TypeVar("T")

RETRYABLE_ERROR_CODES = frozenset(
    {
        "ServiceUnavailable",
        "RequestTimeout",
        "InternalError",
        "Throttling",
        "RequestThrottled",
    }
)


def error_code(exc: BaseException) -> str | None:
    """Return the AWS error code carried by a botocore ``ClientError``."""
    response = getattr(exc, "response", None) or {}
    code = response.get("Error", {}).get("Code")
    return str(code) if code else None


class BackoffPolicy:
    """Retry retryable SimpleDB errors with doubling waits.

    The first retry waits ``min_wait`` ms, each following retry doubles the
    wait, and retrying stops once the next wait would exceed ``max_wait``.
    """

    def __init__(
        self,
        *,
        min_wait: int = MIN_WAIT_MS,
        max_wait: int = MAX_WAIT_MS,
        retryable_codes: frozenset[str] = RETRYABLE_ERROR_CODES,
    ) -> None:
        if min_wait <= 0 or max_wait <= 0:
            raise ValueError("min_wait and max_wait must be > 0")
        if min_wait > max_wait:
            raise ValueError("min_wait must be <= max_wait")
        self.min_wait = min_wait
        self.max_wait = max_wait
        self.retryable_codes = retryable_codes

    def delays(self) -> Iterator[float]:
        """Yield the successive waits in seconds."""
        wait = self.min_wait
        while wait <= self.max_wait:
            yield wait / 1000.0
            wait *= 2

    def is_retryable(self, exc: BaseException) -> bool:
        return error_code(exc) in self.retryable_codes

    async def run(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        """Await ``call()``, retrying retryable failures until the waits run out."""
        delays = self.delays()
        while True:
            try:
                return await call()
            except Exception as exc:
                if not self.is_retryable(exc):
                    raise
                delay = next(delays, None)
                if delay is None:
                    raise
                logger.debug(
                    "%s failed with %s; retrying in %.3fs",
                    operation,
                    error_code(exc),
                    delay,
                )
                await _sleep(delay)


async def _sleep(seconds: float) -> Any:
    """Async sleep (overridable for tests)."""
    await asyncio.sleep(seconds)
