# resilient_ui/core/retry.py
from __future__ import annotations

"""Retry orchestration
----------------------
Runs an async operation under a bounded retry policy: exponential backoff
capped at `max_delay_ms`, multiplicative jitter per attempt, and a predicate
that decides whether a failure is worth another attempt at all.

Attempts are strictly sequential. The wrapped operation must be safe to
re-invoke; nothing here compensates for side effects of a failed attempt.
"""

import asyncio
import dataclasses
import functools
import inspect
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Optional, TypeVar, ParamSpec

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from resilient_ui.core.errors import ElementNotFound
from resilient_ui.utils.config import Settings, get_settings
from resilient_ui.utils.logger import get_logger
from resilient_ui.utils.timing import async_sleep_ms

P = ParamSpec("P")
T = TypeVar("T")

log = get_logger(__name__)


# ---------------- Failure classification ----------------

_TIMEOUT_TYPES: tuple[type[BaseException], ...] = (PlaywrightTimeoutError, TimeoutError, asyncio.TimeoutError)


def _mentions(exc: BaseException, needles: Iterable[str]) -> bool:
    msg = str(exc)
    return any(n in msg for n in needles)


def is_transient_failure(exc: BaseException) -> bool:
    """Timeouts, navigation failures and network errors."""
    if isinstance(exc, _TIMEOUT_TYPES + (ConnectionError,)):
        return True
    return _mentions(exc, ("Timeout", "net::", "Navigation", "waitForLoadState", "wait_for_load_state"))


def is_page_load_failure(exc: BaseException) -> bool:
    if isinstance(exc, _TIMEOUT_TYPES):
        return True
    return _mentions(exc, ("Timeout", "waitForLoadState", "wait_for_load_state", "Navigation", "net::ERR_"))


def is_locator_failure(exc: BaseException) -> bool:
    if isinstance(exc, _TIMEOUT_TYPES + (ElementNotFound,)):
        return True
    return _mentions(exc, ("Timeout", "locator", "element", "selector"))


# ---------------- Policy ----------------

@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 10000
    backoff_multiplier: float = 2.0
    jitter_ratio: float = 0.25
    is_retryable: Callable[[BaseException], bool] = field(default=is_transient_failure, compare=False)
    name: str = "default"

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("delays must be >= 0")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1")
        if not 0 <= self.jitter_ratio < 1:
            raise ValueError("jitter_ratio must be in [0, 1)")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def with_overrides(self, **changes: Any) -> "RetryPolicy":
        return dataclasses.replace(self, **changes)


PAGE_RETRY = RetryPolicy(max_retries=2, base_delay_ms=2000, is_retryable=is_page_load_failure, name="page")
LOCATOR_RETRY = RetryPolicy(max_retries=3, base_delay_ms=1000, is_retryable=is_locator_failure, name="locator")


def policy_from_settings(settings: Optional[Settings] = None) -> RetryPolicy:
    s = settings or get_settings()
    return RetryPolicy(
        max_retries=s.RETRY_MAX_RETRIES,
        base_delay_ms=s.RETRY_BASE_DELAY_MS,
        max_delay_ms=s.RETRY_MAX_DELAY_MS,
        backoff_multiplier=s.RETRY_BACKOFF_MULTIPLIER,
        jitter_ratio=s.RETRY_JITTER_RATIO,
    )


# ---------------- Backoff ----------------

def backoff_delay_ms(policy: RetryPolicy, attempt: int) -> float:
    """Un-jittered delay before attempt `attempt` (0-indexed; attempt 0 has none)."""
    if attempt <= 0:
        return 0.0
    return min(policy.base_delay_ms * policy.backoff_multiplier ** (attempt - 1), policy.max_delay_ms)


def jittered(delay_ms: float, ratio: float) -> float:
    if ratio <= 0 or delay_ms <= 0:
        return delay_ms
    return delay_ms * random.uniform(1 - ratio, 1 + ratio)


# ---------------- State machine ----------------

class RetryState(str, Enum):
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    FAILED_FATAL = "failed_fatal"
    FAILED_EXHAUSTED = "failed_exhausted"


def next_state(policy: RetryPolicy, attempt: int, failure: BaseException) -> RetryState:
    """Transition taken after attempt `attempt` failed with `failure`."""
    if not policy.is_retryable(failure):
        return RetryState.FAILED_FATAL
    if attempt >= policy.max_retries:
        return RetryState.FAILED_EXHAUSTED
    return RetryState.ATTEMPTING


async def with_retry(operation: Callable[[], Awaitable[T]], policy: Optional[RetryPolicy] = None) -> T:
    """
    Invoke `operation` up to `policy.max_retries + 1` times.

    Returns the first successful result. A non-retryable failure is raised
    immediately; after the budget is spent the last failure is raised. In
    both cases the original exception propagates unwrapped.
    """
    policy = policy or policy_from_settings()
    attempt = 0

    while True:
        if attempt > 0:
            delay = jittered(backoff_delay_ms(policy, attempt), policy.jitter_ratio)
            log.info(f"[retry:{policy.name}] Attempt {attempt}/{policy.max_retries} after {round(delay)}ms delay...")
            await async_sleep_ms(delay)

        try:
            result = operation()
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            state = next_state(policy, attempt, exc)
            if state is RetryState.FAILED_FATAL:
                log.error(f"[retry:{policy.name}] Non-retryable error: {exc}")
                raise
            if state is RetryState.FAILED_EXHAUSTED:
                log.error(f"[retry:{policy.name}] All {policy.max_attempts} attempts failed. Final error: {exc}")
                raise
            log.warning(f"[retry:{policy.name}] Attempt {attempt + 1} failed: {exc}")
            attempt += 1
            continue

        if attempt > 0:
            log.info(f"[retry:{policy.name}] Operation succeeded on attempt {attempt + 1}/{policy.max_attempts}")
        return result


async def with_page_retry(operation: Callable[[], Awaitable[T]], **overrides: Any) -> T:
    """Navigation / load-state preset: fewer retries, longer base delay."""
    return await with_retry(operation, PAGE_RETRY.with_overrides(**overrides))


async def with_locator_retry(operation: Callable[[], Awaitable[T]], **overrides: Any) -> T:
    """Element / locator preset: more retries, shorter base delay."""
    return await with_retry(operation, LOCATOR_RETRY.with_overrides(**overrides))


def retrying(policy: Optional[RetryPolicy] = None) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """
    Decorator form of with_retry for async callables.

        @retrying(PAGE_RETRY)
        async def open_cart(page): ...
    """
    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await with_retry(lambda: func(*args, **kwargs), policy)
        return wrapper
    return decorator


__all__ = [
    "RetryPolicy",
    "RetryState",
    "PAGE_RETRY",
    "LOCATOR_RETRY",
    "policy_from_settings",
    "backoff_delay_ms",
    "jittered",
    "next_state",
    "is_transient_failure",
    "is_page_load_failure",
    "is_locator_failure",
    "with_retry",
    "with_page_retry",
    "with_locator_retry",
    "retrying",
]
