"""Retry with exponential backoff for provider requests."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

from drivebridge.config import ClientConfig
from drivebridge.errors import ApiError, NetworkError, RateLimitError

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 1.0

    @classmethod
    def from_config(cls, config: ClientConfig) -> "RetryPolicy":
        return cls(
            max_retries=config.max_retries,
            initial_delay_sec=config.initial_delay_sec,
        )


def execute_with_retry(
    func: Callable[[], T],
    policy: RetryPolicy,
    map_exception: Callable[[Exception], Exception],
) -> T:
    """
    Call `func`, mapping failures with `map_exception`.

    Rate-limit, network and 5xx errors are retried up to `policy.max_retries`
    times, doubling the delay each time. Anything else is raised at once.
    """
    delay = policy.initial_delay_sec
    for attempt in range(policy.max_retries + 1):
        try:
            return func()
        except Exception as exc:
            mapped = map_exception(exc)
            if should_retry(mapped) and attempt < policy.max_retries:
                logger.warning(
                    "Retrying after %s (attempt %d/%d, sleeping %.1fs)",
                    mapped.__class__.__name__, attempt + 1, policy.max_retries, delay,
                )
                time.sleep(delay)
                delay *= 2
                continue
            if mapped is exc:
                raise
            raise mapped from exc

    raise ApiError("Unexpected retry loop termination")


def should_retry(exc: Exception) -> bool:
    if isinstance(exc, RateLimitError):
        return True
    if isinstance(exc, NetworkError):
        return True
    if isinstance(exc, ApiError):
        status_code = getattr(exc, "details", {}).get("status_code")
        return isinstance(status_code, int) and 500 <= status_code <= 599
    return False
