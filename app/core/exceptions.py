"""
Custom exceptions for the AI Mock Interview application.

Services translate upstream model failures into user-facing fallback text, so
these mostly surface from configuration problems, quota exhaustion and
response parsing inside the service layer.
"""
import logging
from typing import Optional
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ============================================================================
# Custom Exception Classes
# ============================================================================

class AppError(Exception):
    """Base exception for all application errors."""
    status_code = 400

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(AppError):
    """Exception raised when configuration is invalid or missing."""
    status_code = 503


class LLMResponseParseError(AppError):
    """Exception raised when a model response does not match the expected schema."""
    status_code = 502


class QuotaExceededError(AppError):
    """Exception raised when the Gemini quota is exhausted (billing, daily limit)."""
    status_code = 429


# ============================================================================
# FastAPI Exception Handlers
# ============================================================================

async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error", "error": str(exc)},
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    logger.warning(f"HTTP exception: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


async def app_error_handler(request: Request, exc: AppError):
    logger.warning(f"{type(exc).__name__}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, **({"details": exc.details} if exc.details else {})},
    )
