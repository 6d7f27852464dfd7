# estrategia_enem/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,  # Environment vars are uppercase
        extra="ignore",      # Ignore unexpected vars instead of raising
    )

    # Core application settings
    DATABASE_URL: str
    HOST: str = "0.0.0.0"
    PORT: int = 8101
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_FILE: str | None = "estrategia_enem.log"

    # CORS settings
    ALLOWED_ORIGINS: list[str] = ["*"]
    ALLOW_CREDENTIALS: bool = False
    ALLOWED_METHODS: list[str] = ["*"]
    ALLOWED_HEADERS: list[str] = [
        "authorization",
        "x-client-info",
        "apikey",
        "content-type",
    ]

    # Completion endpoint (OpenAI-compatible chat completions)
    OPENAI_API_KEY: str | None = None
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TIMEOUT_SECONDS: float = 60.0

    # Free plan quotas
    CHAT_DAILY_LIMIT: int = 5
    ESSAY_MONTHLY_LIMIT: int = 3
    UPGRADE_URL: str = "/premium"

    # Practice exams
    EXAM_BATCH_SIZE: int = 10


def _validate_settings(settings: Settings) -> None:
    """Validate critical application settings."""
    if not settings.DATABASE_URL:
        raise ValueError("DATABASE_URL is required")
    if settings.CHAT_DAILY_LIMIT < 0 or settings.ESSAY_MONTHLY_LIMIT < 0:
        raise ValueError("Quota limits must not be negative")
    if settings.EXAM_BATCH_SIZE < 1:
        raise ValueError("EXAM_BATCH_SIZE must be at least 1")

    # Environment-specific validations
    if settings.ENVIRONMENT == "production" and settings.DEBUG:
        print("WARNING: DEBUG is enabled in production. Consider setting DEBUG=False.")
    # The API key is optional at boot; AI requests fail with a configuration error without it
    if not settings.OPENAI_API_KEY:
        print("WARNING: OPENAI_API_KEY is not set. Chat and essay correction will be unavailable.")


# Initialize settings with error handling
try:
    settings = Settings()
    _validate_settings(settings)
except Exception as e:
    print(f"Error initializing settings: {e}")
    raise
