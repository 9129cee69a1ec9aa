from functools import lru_cache

from app.services.interview import InterviewLLMService


@lru_cache
def get_interview_service() -> InterviewLLMService:
    """
    Dependency providing the shared interview service.
    Tests replace it through ``app.dependency_overrides``.
    """
    return InterviewLLMService()
