"""
Rate-limit handling for HTTP calls.

Only HTTP 429 is retried; every other status is returned to the caller, which
decides whether it is fatal. The delay honors Retry-After when the server sends
a positive value and otherwise grows linearly with the attempt number.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Configuration for retrying rate-limited requests."""
    max_attempts: int = 3
    base_delay_s: float = 3.0
    retry_on_status_codes: tuple[int, ...] = (429,)


def _retry_after_seconds(resp: requests.Response) -> Optional[float]:
    raw = resp.headers.get("retry-after") if resp.headers is not None else None
    if raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def get_with_rate_limit_retry(
    func: Callable[..., requests.Response],
    url: str,
    *,
    retry_config: Optional[RetryConfig] = None,
    sleep: Optional[Callable[[float], None]] = None,
    **kwargs: Any,
) -> requests.Response:
    """
    Call func(url, **kwargs) and retry while the response is rate limited.

    Returns the last response; after max_attempts a 429 response is returned
    as-is so the caller can report it.
    """
    cfg = retry_config or RetryConfig()
    resp = func(url, **kwargs)
    for attempt in range(1, cfg.max_attempts + 1):
        if resp.status_code not in cfg.retry_on_status_codes:
            return resp
        if attempt >= cfg.max_attempts:
            break
        delay = _retry_after_seconds(resp) or cfg.base_delay_s * attempt
        logger.info("Rate limited on %s. Retrying after %.1f s (attempt %d/%d)", url, delay, attempt, cfg.max_attempts)
        (sleep or time.sleep)(delay)
        resp = func(url, **kwargs)
    return resp
