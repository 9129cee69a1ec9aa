"""
Interview services package.

- llm_service.py: Gemini calls for questions, evaluation and coaching
- llm_parser.py: JSON response cleaning and schema validation
"""

from .llm_parser import clean_llm_json_output, parse_llm_response
from .llm_service import InterviewLLMService

__all__ = [
    'InterviewLLMService',
    'clean_llm_json_output',
    'parse_llm_response',
]
