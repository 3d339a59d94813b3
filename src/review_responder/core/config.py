"""
Configuration module for Review Responder Service
"""
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application
    APP_NAME: str = "Review Responder Service"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8003

    # Database
    DATABASE_URL: str = "sqlite:///./review_responder.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Google OAuth
    GOOGLE_AUTH_URL: str = "https://accounts.google.com/o/oauth2/v2/auth"
    GOOGLE_TOKEN_URL: str = "https://oauth2.googleapis.com/token"
    GOOGLE_SCOPE: str = "https://www.googleapis.com/auth/business.manage"
    GOOGLE_REDIRECT_URI: str = "http://localhost:8003/oauth/google/callback"

    # Google Business Profile
    GOOGLE_REVIEWS_API_URL: str = "https://mybusiness.googleapis.com/v4"
    GOOGLE_REVIEWS_PAGE_SIZE: int = 50
    GOOGLE_REVIEWS_MAX_PAGES: int = 100

    # Fallback credentials, used only when the system_config row leaves them blank
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    OPENAI_API_KEY: str = ""

    # OpenAI
    OPENAI_MODEL: str = "gpt-3.5-turbo"
    OPENAI_TEMPERATURE: float = 0.7
    OPENAI_MAX_TOKENS: int = 150

    # Outbound HTTP
    HTTP_TIMEOUT: float = 20.0
    HTTP_MAX_ATTEMPTS: int = 3
    HTTP_BACKOFF_SECONDS: float = 1.0
    HTTP_BACKOFF_MAX_SECONDS: float = 10.0

    # Reviews
    ANONYMOUS_AUTHOR: str = "Anônimo"

    # CORS
    ALLOWED_ORIGINS: list = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # text or json

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Create settings instance
settings = get_settings()
