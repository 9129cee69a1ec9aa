import base64

import pytest
from google.genai import errors, types

from app.schemas.interview import Difficulty
from app.services.interview.llm_service import (
    COACH_EMPTY_MESSAGE,
    COACH_ERROR_MESSAGE,
    QUESTION_FALLBACK_MESSAGE,
    decode_image,
    looks_like_multiple_questions,
)

SNAPSHOT = "data:image/jpeg;base64," + base64.b64encode(b"\xff\xd8\xff fake jpeg").decode()


def server_error():
    return errors.ServerError(503, {"error": {"code": 503, "message": "overloaded", "status": "UNAVAILABLE"}})


# --- generate_question ---

@pytest.mark.asyncio
async def test_generate_question_from_json(make_service):
    service, client = make_service('{"question": "What is a closure?"}')

    result = await service.generate_question("JavaScript", Difficulty.BEGINNER, ["What is hoisting?"])

    assert result.question == "What is a closure?"
    assert result.fallback is False
    call = client.calls[0]
    assert call["model"] == "test-model"
    assert "1. What is hoisting?" in call["contents"]
    assert call["config"].response_mime_type == "application/json"
    assert call["config"].max_output_tokens == 120


@pytest.mark.asyncio
async def test_generate_question_sanitizes_prose(make_service):
    service, _ = make_service("Here are some questions:\n1) What is Big O?\n2) How do you reverse a linked list?")

    result = await service.generate_question("Data Structures and Algorithms", Difficulty.INTERMEDIATE)

    assert result.question == "What is Big O?"
    assert result.fallback is False


@pytest.mark.asyncio
async def test_generate_question_unusable_output_returns_retry_message(make_service):
    service, _ = make_service("   ?   ")

    result = await service.generate_question("Python", Difficulty.ADVANCED)

    assert result.question == QUESTION_FALLBACK_MESSAGE
    assert result.fallback is True


@pytest.mark.asyncio
async def test_generate_question_error_returns_retry_message(make_service):
    service, _ = make_service(ValueError("boom"))

    result = await service.generate_question("Python", Difficulty.ADVANCED)

    assert result.question == QUESTION_FALLBACK_MESSAGE
    assert result.fallback is True


@pytest.mark.asyncio
async def test_generate_question_retries_server_errors(make_service):
    service, client = make_service(server_error(), '{"question": "What is Go\'s scheduler?"}')

    result = await service.generate_question("Go", Difficulty.ADVANCED)

    assert result.question == "What is Go's scheduler?"
    assert len(client.calls) == 2


@pytest.mark.asyncio
async def test_generate_question_without_api_key_returns_mock(make_service):
    service, client = make_service(configured=False)

    result = await service.generate_question("Rust", Difficulty.BEGINNER)

    assert result.fallback is True
    assert result.question.startswith("Mock question for Rust (Beginner)")
    assert client.calls == []


# --- evaluate_answer ---

@pytest.mark.asyncio
async def test_evaluate_answer_parses_feedback(make_service):
    service, client = make_service(
        '{"score": 7, "feedback": "Solid.", "suggestedAnswer": "A closure captures scope."}'
    )

    feedback = await service.evaluate_answer("What is a closure?", "A function.", "JavaScript", Difficulty.BEGINNER)

    assert feedback.score == 7
    assert feedback.suggested_answer == "A closure captures scope."
    assert feedback.non_verbal_feedback is None
    assert feedback.error is False
    assert isinstance(client.calls[0]["contents"], str)


@pytest.mark.asyncio
async def test_evaluate_answer_sends_snapshot_for_advanced(make_service):
    service, client = make_service(
        '{"score": 9, "feedback": "Great.", "suggestedAnswer": "...", "nonVerbalFeedback": "Confident."}'
    )

    feedback = await service.evaluate_answer("Q?", "A", "Python", Difficulty.ADVANCED, image=SNAPSHOT)

    assert feedback.non_verbal_feedback == "Confident."
    contents = client.calls[0]["contents"]
    assert isinstance(contents, list)
    assert "nonVerbalFeedback" in contents[0]
    assert isinstance(contents[1], types.Part)
    assert "nonVerbalFeedback" in client.calls[0]["config"].response_schema.properties


@pytest.mark.asyncio
async def test_evaluate_answer_ignores_snapshot_below_advanced(make_service):
    service, client = make_service('{"score": 5, "feedback": "Ok.", "suggestedAnswer": "..."}')

    await service.evaluate_answer("Q?", "A", "Python", Difficulty.INTERMEDIATE, image=SNAPSHOT)

    assert isinstance(client.calls[0]["contents"], str)


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    "not json at all",
    '{"score": 42, "feedback": "x", "suggestedAnswer": "y"}',
    RuntimeError("safety block"),
])
async def test_evaluate_answer_failure_returns_error_feedback(make_service, response):
    service, _ = make_service(response)

    feedback = await service.evaluate_answer("Q?", "A", "Python", Difficulty.BEGINNER)

    assert feedback.error is True
    assert feedback.score == 0
    assert feedback.suggested_answer == "No suggestion available due to an error."


# --- ask_custom_question ---

@pytest.mark.asyncio
async def test_ask_custom_question_returns_text(make_service):
    service, client = make_service("  Use a set for O(1) lookups.  ")

    answer = await service.ask_custom_question("How do I dedupe a list?", "Python", Difficulty.BEGINNER)

    assert answer == "Use a set for O(1) lookups."
    assert client.calls[0]["config"].max_output_tokens == 220


@pytest.mark.asyncio
async def test_ask_custom_question_empty_and_error(make_service):
    service, _ = make_service("", ValueError("down"))

    assert await service.ask_custom_question("Q", "Python", Difficulty.BEGINNER) == COACH_EMPTY_MESSAGE
    assert await service.ask_custom_question("Q", "Python", Difficulty.BEGINNER) == COACH_ERROR_MESSAGE


# --- helpers ---

def test_looks_like_multiple_questions():
    assert looks_like_multiple_questions("What is X? What is Y?")
    assert looks_like_multiple_questions("Intro\nWhat is X\nHow is Y")
    assert not looks_like_multiple_questions('{"question": "What is X?"}')


def test_decode_image():
    assert decode_image(SNAPSHOT) == b"\xff\xd8\xff fake jpeg"
    assert decode_image("data:image/jpeg;base64,@@not-base64@@") is None
