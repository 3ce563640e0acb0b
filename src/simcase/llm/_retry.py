from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

import anthropic

from simcase import config
from simcase import logger as logger_mod

log = logger_mod.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    """Retry/backoff settings for Claude API calls.

    `max_retries` counts total attempts, so 1 means "no retry".
    """

    max_retries: int = config.MAX_ATTEMPTS
    base_delay_s: float = 1.0
    max_delay_s: float = 20.0

    def __post_init__(self) -> None:
        # Clamp instead of raising to keep retry helpers low-friction.
        if self.max_retries < 1:
            object.__setattr__(self, "max_retries", 1)

        if self.base_delay_s <= 0:
            object.__setattr__(self, "base_delay_s", 0.1)

        if self.max_delay_s < self.base_delay_s:
            object.__setattr__(self, "max_delay_s", float(self.base_delay_s))


def is_retryable_api_error(error: Exception) -> bool:
    """Return True when the error is likely transient.

    Timeouts, dropped connections, provider overload (5xx) and provider rate
    limiting (429) are retried. Auth and request errors are not.
    """

    # APITimeoutError is a subclass of APIConnectionError
    if isinstance(error, anthropic.APIConnectionError):
        return True

    if isinstance(error, anthropic.APIStatusError):
        status = error.status_code
        return status == 429 or 500 <= status <= 599

    return False


def _sleep_with_backoff(
    *, delay_s: float, max_delay_s: float, attempt: int, context: str
) -> None:
    # exponential backoff with jitter (0.7x–1.3x)
    wait = min(max_delay_s, delay_s) * (0.7 + random.random() * 0.6)
    log.warning(
        f"⚠️ Retryable Claude API error while {context}; retrying in {wait:.1f}s "
        f"(attempt {attempt})"
    )
    time.sleep(wait)


def execute_with_retry(
    fn: Callable[[], T],
    *,
    context: str,
    retry: RetryConfig | None = None,
) -> T:
    """Execute a Claude API call with consistent retry/backoff."""

    retry = retry or RetryConfig()
    delay = retry.base_delay_s

    for attempt in range(1, retry.max_retries + 1):
        try:
            return fn()
        except anthropic.APIError as e:
            if (not is_retryable_api_error(e)) or attempt == retry.max_retries:
                log.error(
                    f"❌ Claude API error while {context} "
                    f"(attempt {attempt}/{retry.max_retries}): {e}"
                )
                raise

            _sleep_with_backoff(
                delay_s=delay,
                max_delay_s=retry.max_delay_s,
                attempt=attempt,
                context=context,
            )
            delay *= 2

    raise RuntimeError(f"Unknown error while {context}")
