import logging
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from app.api.v1.interview import interview_router
from app.core.config import settings
from app.core.exceptions import AppError, app_error_handler, global_exception_handler, http_exception_handler
from app.core.llm import is_llm_configured
from app.core.logger import set_correlation_id, setup_logger

setup_logger(
    log_level=logging.DEBUG if settings.DEBUG_MODE else logging.INFO,
    use_json=settings.LOG_JSON
)
logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup: AI Mock Interview")
    if not is_llm_configured():
        logger.warning("GEMINI_API_KEY is not set; question generation will return mock questions")
    yield
    logger.info("Application shutdown")

app = FastAPI(
    title="AI Mock Interview",
    description="Question generation, answer evaluation and coaching for mock interviews.",
    version="1.0.0",
    lifespan=lifespan
)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next):
    correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
    set_correlation_id(correlation_id)
    response = await call_next(request)
    response.headers[CORRELATION_HEADER] = correlation_id
    return response

app.include_router(interview_router, prefix="/api", tags=["interview"])
