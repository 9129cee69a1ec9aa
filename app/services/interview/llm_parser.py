from typing import Any
import json
import logging
import re

from app.core.exceptions import LLMResponseParseError

logger = logging.getLogger(__name__)

CODE_FENCE_OPEN = re.compile(r'```(?:json)?\s*', re.IGNORECASE)


def clean_llm_json_output(raw_text: str) -> str:
    """Cleans LLM output to extract valid JSON."""
    if not raw_text:
        return ""

    # Remove markdown code blocks
    text = CODE_FENCE_OPEN.sub('', raw_text)
    text = text.replace('```', '')

    try:
        json.loads(text)
        return text.strip()
    except json.JSONDecodeError:
        pass

    # Fallback: extract JSON from text
    start_idx = text.find('{')
    end_idx = text.rfind('}')
    if start_idx != -1 and end_idx > start_idx:
        extracted = text[start_idx:end_idx + 1]
        try:
            json.loads(extracted)
            return extracted
        except json.JSONDecodeError:
            pass

    return text.strip()


def parse_llm_response(
    result: Any,
    schema_class: type,
    fallback_data: Any = None
) -> Any:
    """
    Parse LLM response and validate against a pydantic schema.

    Returns ``fallback_data`` when parsing fails and a fallback is given,
    otherwise raises ``LLMResponseParseError``.
    """
    raw_content = result if isinstance(result, str) else str(result)
    try:
        data = json.loads(clean_llm_json_output(raw_content))
        return schema_class.model_validate(data)

    except Exception as e:
        logger.error(f"Error parsing {schema_class.__name__}: {e}")
        logger.debug(f"Raw output (first 500 chars): {raw_content[:500]}...")

        if fallback_data is not None:
            return fallback_data
        raise LLMResponseParseError(
            f"Failed to parse {schema_class.__name__}",
            details={"error": str(e)}
        ) from e
