from __future__ import annotations
import asyncio
import logging
import re
from collections import deque, defaultdict
from datetime import datetime, timezone, timedelta
from typing import Callable, Any, Dict
from email.utils import parsedate_to_datetime

from google.genai.errors import APIError, ClientError, ServerError

from app.core.config import settings
from app.core.exceptions import QuotaExceededError

logger = logging.getLogger(__name__)

HARD_QUOTA_KEYWORDS = ('billing', 'upgrade', 'daily limit')


class ServiceRateLimiter:
    """
    Sliding-window RPM limiter per service.
    Does NOT handle retries or errors, just counts.
    """
    def __init__(self, limits: Dict[str, int] | None = None):
        self._services: Dict[str, deque] = defaultdict(deque)
        self._limits = limits or {
            'gemini': settings.GEMINI_RPM,
            'default': settings.GEMINI_RPM,
        }
        self._lock = asyncio.Lock()
        # "Penalty Box" - end time for services blocked after an API rejection
        self._blocked_until: Dict[str, datetime] = {}

    async def acquire_slot(self, service: str):
        """
        Blocks until a slot is available for the given service.

        Waits happen outside the lock so one blocked service does not stall
        the others; state is re-checked after every wait.
        """
        while True:
            async with self._lock:
                wait_time = self._reserve_or_wait_time(service)
            if wait_time <= 0:
                return
            await asyncio.sleep(wait_time)

    def _reserve_or_wait_time(self, service: str) -> float:
        """Records a request and returns 0, or returns the seconds to wait. Caller holds the lock."""
        now = datetime.now(timezone.utc)

        blocked_until = self._blocked_until.get(service)
        if blocked_until is not None:
            if now < blocked_until:
                wait_time = (blocked_until - now).total_seconds()
                logger.warning(f"Service {service} is blocked. Waiting {wait_time:.1f}s...")
                return wait_time
            del self._blocked_until[service]

        history = self._services[service]
        limit = self._limits.get(service, self._limits['default'])

        # Remove requests older than 1 minute
        while history and history[0] <= now - timedelta(minutes=1):
            history.popleft()

        # If full, wait for the oldest request to expire
        if len(history) >= limit:
            wait_time = (history[0] + timedelta(minutes=1) - now).total_seconds()
            logger.info(f"Local RPM limit for {service}. Sleeping {wait_time:.2f}s")
            return max(wait_time, 0.001)

        history.append(now)
        return 0.0

    async def block_service(self, service: str, seconds: float):
        """Manually blocks a service (used when we hit a 429)."""
        async with self._lock:
            logger.error(f"Blocking {service} for {seconds}s due to API rejection.")
            self._blocked_until[service] = datetime.now(timezone.utc) + timedelta(seconds=seconds)

    def current_usage(self, service: str) -> int:
        """Requests recorded for ``service`` in the last minute."""
        history = self._services[service]
        cutoff = datetime.now(timezone.utc) - timedelta(minutes=1)
        return sum(1 for ts in history if ts >= cutoff)


rate_limiter = ServiceRateLimiter()


def parse_retry_after(exception: Exception) -> float:
    """
    Extracts wait time (seconds) from an API error, 0.0 when absent.
    """
    try:
        # 1. Retry-After header
        response = getattr(exception, 'response', None)
        if response is not None:
            headers = getattr(response, 'headers', None) or {}
            val = headers.get('Retry-After') or headers.get('retry-after')
            if val:
                if val.isdigit():
                    return float(val)
                return (parsedate_to_datetime(val) - datetime.now(timezone.utc)).total_seconds()

        error_str = str(exception)

        # 2. Gemini error message
        retry_match = re.search(r'retry in ([\d.]+)s', error_str, re.IGNORECASE)
        if retry_match:
            return float(retry_match.group(1))

        # 3. retryDelay from the error details
        delay_match = re.search(r"""['"]retryDelay['"]:\s*['"]([\d.]+)s['"]""", error_str)
        if delay_match:
            return float(delay_match.group(1))

    except (ValueError, TypeError) as e:
        logger.debug(f"Could not parse retry hint: {e}")
    return 0.0


def is_retryable(exception: Exception) -> bool:
    """Rate limits (429) and server-side (5xx) Gemini errors are retryable."""
    if isinstance(exception, ServerError):
        return True
    if isinstance(exception, ClientError):
        return getattr(exception, 'code', None) == 429
    return isinstance(exception, (asyncio.TimeoutError, ConnectionError))


async def safe_api_call(
    func: Callable[..., Any],
    *args,
    service: str = 'default',
    limiter: ServiceRateLimiter | None = None,
    **kwargs
) -> Any:
    """
    Awaits ``func`` under the rate limiter, retrying transient Gemini errors.

    Hard quota errors are raised as ``QuotaExceededError`` without retrying.
    """
    limiter = limiter or rate_limiter
    max_retries = max(1, settings.RETRY_MAX_ATTEMPTS)
    base_delay = settings.RETRY_BASE_DELAY
    max_delay = settings.RETRY_MAX_DELAY

    for attempt in range(max_retries):
        await limiter.acquire_slot(service)
        try:
            return await func(*args, **kwargs)

        except Exception as e:
            if isinstance(e, APIError):
                error_message = str(e).lower()
                if any(keyword in error_message for keyword in HARD_QUOTA_KEYWORDS):
                    logger.error(f"API quota exhausted for {service}: {str(e)[:200]}")
                    raise QuotaExceededError(
                        f"API quota exhausted for {service}. Check your billing/plan."
                    ) from e

            if not is_retryable(e):
                logger.error(f"Non-retryable error for {service}: {e}")
                raise

            if attempt == max_retries - 1:
                logger.error(f"Max retries reached for {service}")
                raise

            retry_delay = parse_retry_after(e)
            if retry_delay > 0:
                wait_time = min(retry_delay, max_delay)
                await limiter.block_service(service, wait_time)
                logger.warning(f"Rate limit for {service}. Retrying in {wait_time:.1f}s (attempt {attempt + 1}/{max_retries})")
            else:
                wait_time = min(base_delay * (2 ** attempt), max_delay)
                logger.warning(f"Retrying {service} in {wait_time:.1f}s (attempt {attempt + 1}/{max_retries})")
                await asyncio.sleep(wait_time)

    raise RuntimeError(f"Failed after {max_retries} attempts")
