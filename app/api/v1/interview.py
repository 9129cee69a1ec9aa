import logging

from fastapi import APIRouter, Depends

from app.api.deps import get_interview_service
from app.schemas.interview import (
    CoachRequest,
    CoachResponse,
    EvaluationRequest,
    Feedback,
    QuestionRequest,
    QuestionResponse,
)
from app.services.interview import InterviewLLMService

logger = logging.getLogger(__name__)

interview_router = APIRouter()


@interview_router.get("/health")
async def health():
    return {"ok": True}


@interview_router.post("/generate-question", response_model=QuestionResponse)
async def generate_question(
    request: QuestionRequest,
    service: InterviewLLMService = Depends(get_interview_service)
):
    """
    Generates a single interview question for a subject and difficulty.
    A retry message with ``fallback=true`` is returned when generation fails.
    """
    logger.info(
        f"Question requested: subject='{request.subject}', difficulty={request.difficulty.value}, "
        f"previous={len(request.previous_questions)}"
    )
    return await service.generate_question(request.subject, request.difficulty, request.previous_questions)


@interview_router.post("/evaluate-answer", response_model=Feedback)
async def evaluate_answer(
    request: EvaluationRequest,
    service: InterviewLLMService = Depends(get_interview_service)
):
    """Scores a candidate answer; ``error=true`` marks fallback feedback."""
    return await service.evaluate_answer(
        request.question,
        request.answer,
        request.subject,
        request.difficulty,
        image=request.image
    )


@interview_router.post("/ask", response_model=CoachResponse)
async def ask_coach(
    request: CoachRequest,
    service: InterviewLLMService = Depends(get_interview_service)
):
    answer = await service.ask_custom_question(request.question, request.subject, request.difficulty)
    return CoachResponse(answer=answer)
