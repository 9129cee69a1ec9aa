import asyncio
from types import SimpleNamespace

import pytest
from google.genai import errors

from app.core.exceptions import QuotaExceededError
from app.services.tools.rate_limiter import ServiceRateLimiter, is_retryable, parse_retry_after, safe_api_call


def client_error(code, message):
    return errors.ClientError(code, {"error": {"code": code, "message": message, "status": "ERR"}})


def flaky(*outcomes):
    calls = []

    async def func():
        calls.append(1)
        outcome = outcomes[len(calls) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome
    return func, calls


@pytest.mark.asyncio
async def test_safe_api_call_retries_rate_limit(limiter):
    func, calls = flaky(client_error(429, "Resource exhausted. Please retry in 0s."), "ok")

    assert await safe_api_call(func, service="gemini", limiter=limiter) == "ok"
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_safe_api_call_raises_after_max_attempts(limiter):
    errs = [errors.ServerError(500, {"error": {"code": 500, "message": "internal", "status": "INTERNAL"}})] * 3
    func, calls = flaky(*errs)

    with pytest.raises(errors.ServerError):
        await safe_api_call(func, service="gemini", limiter=limiter)
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_safe_api_call_hard_quota_is_not_retried(limiter):
    func, calls = flaky(client_error(429, "Quota exceeded, check your billing details"))

    with pytest.raises(QuotaExceededError):
        await safe_api_call(func, service="gemini", limiter=limiter)
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_safe_api_call_non_retryable_error(limiter):
    func, calls = flaky(client_error(400, "Invalid argument"))

    with pytest.raises(errors.ClientError):
        await safe_api_call(func, service="gemini", limiter=limiter)
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_limiter_records_requests(limiter):
    await limiter.acquire_slot("gemini")
    await limiter.acquire_slot("gemini")
    assert limiter.current_usage("gemini") == 2
    assert limiter.current_usage("other") == 0


@pytest.mark.asyncio
async def test_blocked_service_does_not_stall_other_services(limiter):
    await limiter.block_service("gemini", 0.3)
    blocked = asyncio.create_task(limiter.acquire_slot("gemini"))
    await asyncio.sleep(0.01)

    await asyncio.wait_for(limiter.acquire_slot("other"), timeout=0.1)
    assert limiter.current_usage("other") == 1
    assert not blocked.done()

    await asyncio.wait_for(blocked, timeout=1.0)
    assert limiter.current_usage("gemini") == 1


@pytest.mark.asyncio
async def test_full_window_waits_for_oldest_request():
    limiter = ServiceRateLimiter(limits={"default": 1})
    await limiter.acquire_slot("gemini")

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(limiter.acquire_slot("gemini"), timeout=0.05)
    await asyncio.wait_for(limiter.acquire_slot("other"), timeout=0.1)
    assert limiter.current_usage("gemini") == 1


def test_is_retryable():
    assert is_retryable(client_error(429, "slow down"))
    assert not is_retryable(client_error(403, "forbidden"))
    assert not is_retryable(ValueError("nope"))


def test_parse_retry_after_sources():
    with_header = Exception("rate limited")
    with_header.response = SimpleNamespace(headers={"Retry-After": "12"})
    assert parse_retry_after(with_header) == 12.0

    assert parse_retry_after(Exception("Please retry in 3.5s.")) == 3.5
    assert parse_retry_after(Exception("{'retryDelay': '7s'}")) == 7.0
    assert parse_retry_after(Exception("no hint")) == 0.0
