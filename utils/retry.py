import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

import config

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-delay bounded retry. ``max_retries`` counts total attempts."""
    max_retries: int = config.MAX_RETRIES
    delay: float = config.RETRY_DELAY

    def __post_init__(self):
        if self.max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        if self.delay < 0:
            raise ValueError("delay must be >= 0")


DEFAULT_RETRY_POLICY = RetryPolicy()


async def retry(operation: Callable[[], Awaitable[T]],
                policy: Optional[RetryPolicy] = None,
                label: str = "") -> T:
    """
    Await ``operation()`` until it succeeds or ``policy.max_retries`` attempts
    have been made. The last failure is re-raised. Fixed delay, no jitter.
    """
    policy = policy or DEFAULT_RETRY_POLICY
    what = f" ({label})" if label else ""
    for attempt in range(1, policy.max_retries + 1):
        try:
            return await operation()
        except Exception as e:
            if attempt >= policy.max_retries:
                raise
            logger.warning(
                "[yellow]Error occurred%s: %s. Retrying... (%d/%d)[/yellow]",
                what, e, attempt, policy.max_retries,
            )
            await asyncio.sleep(policy.delay)
