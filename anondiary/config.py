"""Configuration settings for anon-diary."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Generation endpoint (OpenAI-compatible chat completions)
    groq_api_key: str | None = None  # Missing key means every post falls back
    generation_url: str = "https://api.groq.com/openai/v1/chat/completions"
    generation_model: str = "llama-3.3-70b-versatile"
    generation_temperature: float = Field(default=0.8, ge=0.0, le=2.0)
    generation_max_tokens: int = Field(default=1800, ge=1)
    generation_timeout: float = Field(default=30.0, gt=0)

    # Storage
    database_path: str = "diary.db"
    memory_context_limit: int = Field(default=6, ge=1)

    # Rate limiting (off unless --rate-limit or RATE_LIMIT_ENABLED)
    rate_limit_enabled: bool = False
    rate_limit_max_requests: int = Field(default=100, ge=1)
    rate_limit_window_seconds: int = Field(default=900, ge=1)
    trusted_proxy_cidrs: list[str] = [
        "10.0.0.0/8",
        "172.16.0.0/12",
        "192.168.0.0/16",
        "127.0.0.0/8",
        "::1/128",
    ]

    # App
    debug: bool = False
    cors_origins: list[str] = ["*"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra env vars not in model

    @property
    def rate_limit(self) -> str:
        """Sliding window limit in slowapi's limit-string syntax."""
        return f"{self.rate_limit_max_requests} per {self.rate_limit_window_seconds} seconds"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
