"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173,"
    "http://localhost:8080,"
    "https://parkmate-admin.vercel.app"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    razorpay_key_id: str
    razorpay_key_secret: str
    razorpay_base_url: str = "https://api.razorpay.com/v1"
    ocr_backend: str = "tesseract"
    tesseract_lang: str = "eng"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4.1-mini"
    cors_allowed_origins: str = DEFAULT_CORS_ORIGINS
    image_fetch_timeout_seconds: float = 10.0
    ocr_timeout_seconds: float = 10.0
    payment_timeout_seconds: float = 5.0
    hourly_rate_minor_units: int = 1000
    minimum_charge_minor_units: int = 1000
    currency: str = "INR"
    max_allocation_attempts: int = 10
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_cors_origins(raw: str | None) -> list[str]:
    """Parse the comma-separated CORS origin list from env."""
    if raw is None:
        return []
    cleaned = raw.strip()
    if cleaned == "*":
        return ["*"]
    origins: list[str] = []
    for chunk in cleaned.split(","):
        value = chunk.strip().rstrip("/")
        if value and value not in origins:
            origins.append(value)
    return origins
