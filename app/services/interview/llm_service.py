import asyncio
import base64
import binascii
import logging
import re
import time
from typing import Any, Callable, List, Optional

from google.genai import types

from app.core.config import settings
from app.core.llm import GEMINI_MODEL, get_genai_client, is_llm_configured
from app.core.logger import log_async_execution_time
from app.core.prompts import generate_coach_prompt, generate_evaluation_prompt, generate_question_prompt
from app.schemas.interview import Difficulty, Feedback, GeneratedQuestion, QuestionResponse
from app.services.extraction import extract_question
from app.services.interview.llm_parser import parse_llm_response
from app.services.tools.rate_limiter import ServiceRateLimiter, safe_api_call

logger = logging.getLogger(__name__)

QUESTION_FALLBACK_MESSAGE = "I'm having trouble coming up with a question right now. Let's try again in a moment."
COACH_EMPTY_MESSAGE = "I couldn't generate an answer just now. Please try asking again."
COACH_ERROR_MESSAGE = "Sorry, I hit a snag answering that. Please try again."

NEWLINE_QUESTION_WORD = re.compile(r'\n.*(what|how|why|explain|describe|define)', re.IGNORECASE)


def _feedback_schema(with_visual_analysis: bool) -> types.Schema:
    properties = {
        "score": types.Schema(
            type=types.Type.INTEGER,
            description="A score from 0 to 10 for the user's answer. 0 is very poor, 10 is excellent."
        ),
        "feedback": types.Schema(
            type=types.Type.STRING,
            description="Constructive feedback on the user's answer. Highlight good points and areas for improvement. Be encouraging."
        ),
        "suggestedAnswer": types.Schema(
            type=types.Type.STRING,
            description="An ideal, well-structured answer to the original question."
        ),
    }
    if with_visual_analysis:
        properties["nonVerbalFeedback"] = types.Schema(
            type=types.Type.STRING,
            description="Feedback on the user's non-verbal communication (e.g., facial expression, confidence, engagement) based on their image. Comment on their professionalism. Be constructive."
        )
    return types.Schema(
        type=types.Type.OBJECT,
        properties=properties,
        required=["score", "feedback", "suggestedAnswer"]
    )


def error_feedback() -> Feedback:
    return Feedback(
        score=0,
        feedback=(
            "Sorry, I encountered an error while evaluating your answer. It might be due to a content safety "
            "policy or a network issue. Please try a different answer or restart the session."
        ),
        suggested_answer="No suggestion available due to an error.",
        error=True,
    )


def mock_question(subject: str, difficulty: Difficulty) -> str:
    return (
        f"Mock question for {subject} ({Difficulty(difficulty).value}) - "
        "set GEMINI_API_KEY on server to enable real generation."
    )


def looks_like_multiple_questions(raw: str) -> bool:
    """True when the raw output has several '?' or several question-word lines."""
    return raw.count('?') > 1 or len(NEWLINE_QUESTION_WORD.findall(raw)) > 1


def decode_image(data_url: str) -> Optional[bytes]:
    """Decodes the base64 payload of a ``data:image/...;base64,`` URL."""
    payload = data_url.split(',', 1)[1] if ',' in data_url else data_url
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        logger.warning("Ignoring webcam snapshot: invalid base64 payload")
        return None


class InterviewLLMService:
    """
    Gemini-backed question generation, answer evaluation and coaching.

    Every upstream failure is converted into user-facing fallback content;
    callers never see an exception from these methods.
    """

    def __init__(
        self,
        client_factory: Callable[[], Any] = get_genai_client,
        configured: Callable[[], bool] = is_llm_configured,
        limiter: Optional[ServiceRateLimiter] = None,
        model: str = GEMINI_MODEL,
    ):
        self._client_factory = client_factory
        self._configured = configured
        self._limiter = limiter
        self._model = model

    async def _generate(self, contents: Any, config: types.GenerateContentConfig, label: str) -> str:
        """Runs one Gemini call under the rate limiter and returns the stripped text."""
        client = self._client_factory()

        async def _async_wrapper():
            return await asyncio.to_thread(
                client.models.generate_content,
                model=self._model,
                contents=contents,
                config=config
            )

        logger.info(f"[{label}] Gemini API call started")
        start_time = time.perf_counter()
        response = await safe_api_call(_async_wrapper, service='gemini', limiter=self._limiter)
        elapsed = time.perf_counter() - start_time
        logger.info(f"[{label}] Gemini API call completed in {elapsed:.2f}s")

        return (response.text or "").strip()

    @log_async_execution_time
    async def generate_question(
        self,
        subject: str,
        difficulty: Difficulty,
        previous_questions: Optional[List[str]] = None
    ) -> QuestionResponse:
        """
        Generate one interview question for the subject and difficulty.

        Args:
            subject: Subject, company or free-form topic.
            difficulty: Interview difficulty.
            previous_questions: Questions already asked, to avoid repetition.

        Returns:
            QuestionResponse; ``fallback`` is set for the mock question (no API
            key) and for the retry message after any failure.
        """
        if not self._configured():
            logger.warning("Gemini is not configured, returning mock question")
            return QuestionResponse(question=mock_question(subject, difficulty), fallback=True)

        try:
            prompt = generate_question_prompt(subject, difficulty, previous_questions or [])
            config = types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=GeneratedQuestion,
                temperature=settings.QUESTION_TEMPERATURE,
                max_output_tokens=settings.QUESTION_MAX_TOKENS,
                thinking_config=types.ThinkingConfig(thinking_budget=0),
            )
            raw = await self._generate(prompt, config, label="Question")
        except Exception as e:
            logger.error(f"Error generating question: {e}", exc_info=True)
            return QuestionResponse(question=QUESTION_FALLBACK_MESSAGE, fallback=True)

        if looks_like_multiple_questions(raw):
            logger.warning(f"Gemini returned multiple-question-like output. Raw response follows:\n{raw}")

        question = extract_question(raw)
        if question is None:
            logger.warning(f"Could not extract a question from model output: {raw[:200]!r}")
            return QuestionResponse(question=QUESTION_FALLBACK_MESSAGE, fallback=True)

        return QuestionResponse(question=question)

    @log_async_execution_time
    async def evaluate_answer(
        self,
        question: str,
        answer: str,
        subject: str,
        difficulty: Difficulty,
        image: Optional[str] = None
    ) -> Feedback:
        """
        Score an answer. Visual analysis runs only for Advanced sessions that
        send a webcam snapshot.
        """
        difficulty = Difficulty(difficulty)
        image_bytes = decode_image(image) if image and difficulty == Difficulty.ADVANCED else None
        with_visual_analysis = image_bytes is not None

        try:
            prompt = generate_evaluation_prompt(question, answer, subject, difficulty, with_visual_analysis)
            contents: Any = prompt
            if with_visual_analysis:
                contents = [prompt, types.Part.from_bytes(data=image_bytes, mime_type="image/jpeg")]

            config = types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=_feedback_schema(with_visual_analysis),
            )
            raw = await self._generate(contents, config, label="Evaluation")
            return parse_llm_response(raw, Feedback)

        except Exception as e:
            logger.error(f"Error evaluating answer: {e}", exc_info=True)
            return error_feedback()

    @log_async_execution_time
    async def ask_custom_question(self, question: str, subject: str, difficulty: Difficulty) -> str:
        """Answer the candidate's own question as an interview coach."""
        try:
            config = types.GenerateContentConfig(
                temperature=settings.COACH_TEMPERATURE,
                max_output_tokens=settings.COACH_MAX_TOKENS,
                thinking_config=types.ThinkingConfig(thinking_budget=0),
            )
            text = await self._generate(generate_coach_prompt(question, subject, difficulty), config, label="Coach")
        except Exception as e:
            logger.error(f"Error answering custom question: {e}", exc_info=True)
            return COACH_ERROR_MESSAGE

        return text or COACH_EMPTY_MESSAGE
