"""
Centralized configuration for the QA Assistant backend.

All settings are loaded from environment variables with sensible defaults.
Pydantic Settings provides validation and type coercion.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load .env then .env.local (so .env.local overrides). Use override=True so file wins over shell.
_repo_root = Path(__file__).resolve().parent.parent
load_dotenv(_repo_root / ".env", override=True)
_env_local = _repo_root / ".env.local"
if _env_local.exists():
    load_dotenv(_env_local, override=True)


class LLMConfig(BaseSettings):
    """Provider API keys and optional per-provider model overrides."""

    groq_api_key: str = Field(default="", alias="GROQ_API_KEY")
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    anthropic_api_key: str = Field(default="", alias="ANTHROPIC_API_KEY")
    google_api_key: str = Field(default="", alias="GOOGLE_API_KEY")

    # Empty means "use the adapter's default model".
    groq_model: str = Field(default="", alias="GROQ_MODEL")
    openai_model: str = Field(default="", alias="OPENAI_MODEL")
    anthropic_model: str = Field(default="", alias="ANTHROPIC_MODEL")
    gemini_model: str = Field(default="", alias="GEMINI_MODEL")

    groq_base_url: str = Field(
        default="https://api.groq.com/openai/v1",
        alias="GROQ_BASE_URL",
        description="OpenAI-compatible endpoint used for Groq.",
    )


class ObservabilityConfig(BaseSettings):
    """Logging and Prometheus metrics."""

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    metrics_enabled: bool = Field(default=False, alias="PROMETHEUS_METRICS_ENABLED")
    metrics_port: int = Field(default=8000, alias="PROMETHEUS_METRICS_PORT")


class Settings(BaseSettings):
    """Root settings container. Access all config from one object."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Singleton settings instance. Cached after first call."""
    return Settings()
