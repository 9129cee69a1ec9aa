import pytest

from app.core.exceptions import LLMResponseParseError
from app.schemas.interview import Feedback, GeneratedQuestion
from app.services.interview.llm_parser import clean_llm_json_output, parse_llm_response


@pytest.mark.parametrize("raw, expected", [
    ('```json\n{"question": "What is X?"}\n```', '{"question": "What is X?"}'),
    ('Sure! {"question": "What is X?"} Hope that helps.', '{"question": "What is X?"}'),
    ("plain text", "plain text"),
    ("", ""),
])
def test_clean_llm_json_output(raw, expected):
    assert clean_llm_json_output(raw) == expected


def test_parse_llm_response_accepts_camel_case_aliases():
    feedback = parse_llm_response(
        '{"score": 8, "feedback": "Good", "suggestedAnswer": "Model answer", "nonVerbalFeedback": "Calm"}',
        Feedback
    )
    assert feedback.suggested_answer == "Model answer"
    assert feedback.non_verbal_feedback == "Calm"


def test_parse_llm_response_returns_fallback():
    fallback = GeneratedQuestion(question="fallback")
    assert parse_llm_response("not json", GeneratedQuestion, fallback_data=fallback) is fallback


def test_parse_llm_response_raises_without_fallback():
    with pytest.raises(LLMResponseParseError):
        parse_llm_response('{"unexpected": true}', GeneratedQuestion)
