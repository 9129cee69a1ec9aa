import logging

from google import genai

from app.core.config import settings
from app.core.exceptions import ConfigurationError

"""
Gemini client configuration.

The client is created lazily so the application can start (and serve the
mock question) without an API key.
"""

logger = logging.getLogger(__name__)

GEMINI_MODEL = settings.GEMINI_MODEL

_genai_client = None


def is_llm_configured() -> bool:
    """True when a Gemini API key is available."""
    return bool(settings.GEMINI_API_KEY)


def get_genai_client() -> genai.Client:
    """Get or create the GenAI SDK client instance."""
    global _genai_client
    if _genai_client is None:
        if not is_llm_configured():
            logger.error("No Gemini API key found in environment. Set GEMINI_API_KEY in .env.")
            raise ConfigurationError("GEMINI_API_KEY is not configured")
        _genai_client = genai.Client(api_key=settings.GEMINI_API_KEY)
    return _genai_client
