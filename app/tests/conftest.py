from types import SimpleNamespace

import pytest

from app.core.config import settings
from app.services.interview import InterviewLLMService
from app.services.tools.rate_limiter import ServiceRateLimiter


class FakeGenAIClient:
    """Stands in for ``google.genai.Client``; replays queued responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.models = SimpleNamespace(generate_content=self._generate_content)

    def _generate_content(self, **kwargs):
        self.calls.append(kwargs)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return SimpleNamespace(text=response)


@pytest.fixture(autouse=True)
def fast_retries(monkeypatch):
    monkeypatch.setattr(settings, "RETRY_BASE_DELAY", 0.0)
    monkeypatch.setattr(settings, "RETRY_MAX_DELAY", 0.0)


@pytest.fixture
def limiter():
    return ServiceRateLimiter(limits={"gemini": 1000, "default": 1000})


@pytest.fixture
def make_service(limiter):
    def factory(*responses, configured=True):
        client = FakeGenAIClient(*responses)
        service = InterviewLLMService(
            client_factory=lambda: client,
            configured=lambda: configured,
            limiter=limiter,
            model="test-model",
        )
        return service, client
    return factory
