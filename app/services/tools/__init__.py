"""Shared tools for Gemini access."""
from .rate_limiter import ServiceRateLimiter, parse_retry_after, rate_limiter, safe_api_call

__all__ = [
    "ServiceRateLimiter",
    "parse_retry_after",
    "rate_limiter",
    "safe_api_call",
]
