from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path
from dotenv import load_dotenv


CONFIG_DIR = Path(__file__).resolve().parent
# .env lives in the project root (two levels up from app/core)
PROJECT_ROOT = CONFIG_DIR.parent.parent
ENV_FILE_PATH = PROJECT_ROOT / '.env'

load_dotenv(ENV_FILE_PATH)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE_PATH),
        env_file_encoding='utf-8',
        extra='ignore'
    )

    DEBUG_MODE: bool = False
    LOG_JSON: bool = False

    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"

    # Requests Per Minute against Gemini
    GEMINI_RPM: int = 15

    # Question generation
    QUESTION_TEMPERATURE: float = 0.6
    QUESTION_MAX_TOKENS: int = 120

    # Free-form coaching answers
    COACH_TEMPERATURE: float = 0.6
    COACH_MAX_TOKENS: int = 220

    # Retry Configuration
    RETRY_MAX_ATTEMPTS: int = 3
    RETRY_BASE_DELAY: float = 1.0
    RETRY_MAX_DELAY: float = 60.0

    CORS_ORIGINS: list[str] = ["*"]


settings = Settings()
