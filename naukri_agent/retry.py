"""Retry and polling policies expressed as data, with an injectable sleep.

Every wait in the engine goes through one of these objects so tests can
swap in :func:`no_sleep` and run the whole flow instantly.
"""
from __future__ import annotations

import functools
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Tuple, Type

logger = logging.getLogger(__name__)

Sleep = Callable[[float], None]


def no_sleep(_seconds: float) -> None:
    return None


@dataclass(frozen=True)
class RetryPolicy:
    """``max_attempts`` tries; ``backoff[i]`` seconds before try ``i + 2``.

    When there are more retries than backoff entries the last entry repeats.
    """

    max_attempts: int = 3
    backoff: Tuple[float, ...] = (2.0, 3.0, 3.0)

    def delay_before(self, attempt: int) -> float:
        """Delay to wait before ``attempt`` (1-based); zero for the first."""
        if attempt <= 1 or not self.backoff:
            return 0.0
        idx = min(attempt - 2, len(self.backoff) - 1)
        return self.backoff[idx]

    def attempts(self) -> Iterator[int]:
        return iter(range(1, self.max_attempts + 1))


@dataclass(frozen=True)
class PollPolicy:
    max_polls: int = 20
    interval: float = 1.0


@dataclass(frozen=True)
class Timeouts:
    """Milliseconds for driver waits, seconds for settle pauses."""

    navigation_ms: int = 45_000
    job_page_ms: int = 30_000
    marker_ms: int = 15_000
    reload_ms: int = 10_000
    element_ms: int = 5_000
    chat_open_ms: int = 5_000
    login_settle: float = 5.0
    session_settle: float = 3.0
    page_render: float = 2.0
    after_apply_click: float = 5.0
    between_jobs: float = 1.0


def retry(
    policy: RetryPolicy = RetryPolicy(),
    *,
    retryable: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Sleep = time.sleep,
) -> Callable:
    """Decorator: re-run the wrapped call following ``policy``.

    The last failure is re-raised once the policy is exhausted.
    """

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in policy.attempts():
                delay = policy.delay_before(attempt)
                if delay:
                    sleep(delay)
                try:
                    return fn(*args, **kwargs)
                except retryable as exc:
                    if attempt == policy.max_attempts:
                        logger.error(
                            "%s failed after %d attempts: %s",
                            fn.__qualname__,
                            policy.max_attempts,
                            exc,
                        )
                        raise
                    logger.warning(
                        "%s attempt %d/%d failed (%s), retrying in %.1fs",
                        fn.__qualname__,
                        attempt,
                        policy.max_attempts,
                        exc,
                        policy.delay_before(attempt + 1),
                    )
            raise RuntimeError("retry policy allows no attempts")

        return wrapper

    return decorator
