from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Tuple, Type, TypeVar

from playwright.sync_api import Error as PWError

from . import config
from .error_codes import ErrorCode
from .logging_utils import _crawl_event

T = TypeVar("T")

# PWError is the base of Playwright's TimeoutError, so both are retried.
RETRYABLE_EXCEPTIONS: Tuple[Type[BaseException], ...] = (PWError,)


@dataclass
class RetryOutcome(Generic[T]):
    """Result of a :func:`retry_call` invocation."""

    ok: bool
    attempts: int
    value: Optional[T] = None
    error: Optional[BaseException] = None


def retry_call(
    action: Callable[[], T],
    *,
    label: str,
    max_attempts: int,
    delay_seconds: float,
    retry_on: Tuple[Type[BaseException], ...] = RETRYABLE_EXCEPTIONS,
    sleep: Callable[[float], None] = time.sleep,
) -> RetryOutcome[T]:
    """Run ``action`` up to ``max_attempts`` times with a fixed delay between attempts.

    Exactly one ``sleep(delay_seconds)`` precedes every retry; no delay follows
    the final failed attempt. Exceptions outside ``retry_on`` propagate.
    """

    attempts_allowed = max(1, max_attempts)
    last_error: Optional[BaseException] = None
    for attempt in range(1, attempts_allowed + 1):
        try:
            value = action()
        except retry_on as exc:
            last_error = exc
            will_retry = attempt < attempts_allowed
            _crawl_event(
                "state",
                phase="retry_decision",
                target=label,
                attempt=attempt,
                max_attempts=attempts_allowed,
                error_code=ErrorCode.NAVIGATION,
                error=str(exc),
                will_retry=will_retry,
            )
            if will_retry:
                sleep(delay_seconds)
            continue
        return RetryOutcome(ok=True, attempts=attempt, value=value)

    _crawl_event(
        "error",
        phase="retry_decision",
        kind="capped",
        target=label,
        attempt=attempts_allowed,
        max_attempts=attempts_allowed,
        error_code=ErrorCode.NAVIGATION,
    )
    return RetryOutcome(ok=False, attempts=attempts_allowed, error=last_error)


def navigate_with_retry(
    page,
    url: str,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> RetryOutcome[None]:
    """Open ``url`` on ``page`` with the fixed navigation retry policy."""

    def _goto() -> None:
        page.goto(
            url,
            wait_until="networkidle",
            timeout=config.NAV_TIMEOUT_SECONDS * 1000,
        )

    return retry_call(
        _goto,
        label=url,
        max_attempts=config.NAV_MAX_ATTEMPTS,
        delay_seconds=config.NAV_RETRY_DELAY_SECONDS,
        sleep=sleep,
    )


__all__ = ["RetryOutcome", "retry_call", "navigate_with_retry", "RETRYABLE_EXCEPTIONS"]
