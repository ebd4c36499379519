"""Application configuration management."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Pipeline settings loaded from environment variables (and ``.env``)."""

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Level applied to the package loggers when a pipeline is built"
    )

    # LLM Provider Configuration
    llm_provider: str = Field(
        default="openai",
        description="LLM provider to use: 'openai' or 'gemini'"
    )

    # OpenAI-compatible API Configuration
    openai_api_key: str = Field(
        default="",
        description="API key for the OpenAI-compatible chat completions endpoint"
    )
    openai_api_url: str = Field(
        default="https://api.openai.com/v1/chat/completions",
        description="Chat completions endpoint URL"
    )

    # Gemini API Configuration
    gemini_api_key: str = Field(
        default="",
        description="Gemini API key (required if llm_provider='gemini')"
    )

    # Model Routing
    text_model: str = Field(
        default="gpt-4o",
        description="Model for long or structurally complex text syllabi"
    )
    simple_text_model: str = Field(
        default="gpt-4o-mini",
        description="Cheaper model for short, simple text syllabi"
    )
    vision_model: str = Field(
        default="gpt-4o",
        description="Vision-capable model for photographed or scanned syllabi"
    )
    enable_model_routing: bool = Field(
        default=True,
        description="Pick simple_text_model for short inputs instead of always text_model"
    )
    temperature: float = Field(
        default=0.1,
        description="Sampling temperature; kept low for consistent parsing"
    )
    max_output_tokens: int = Field(
        default=4000,
        description="Upper bound on tokens generated per extraction call"
    )

    # Retry Configuration
    max_retries: int = Field(
        default=3,
        ge=0,
        description="Total extraction attempts per document"
    )
    retry_base_delay: float = Field(
        default=1.0,
        ge=0.0,
        description="Base for exponential backoff: base * 2**attempt seconds"
    )
    retry_invalid_responses: bool = Field(
        default=True,
        description="Retry malformed or structurally invalid model responses"
    )

    # Extraction Quality
    confidence_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Results below this parsing confidence get a review warning"
    )

    # Input Limits
    max_file_size: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum accepted document size in bytes"
    )
    max_batch_files: int = Field(
        default=5,
        description="Maximum documents accepted in one batch"
    )
    max_concurrent_documents: int = Field(
        default=3,
        description="Documents processed concurrently within a batch"
    )

    # Timeout Settings (in seconds)
    http_timeout: int = 60

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parent.parent / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def get_settings() -> Settings:
    """Get application settings instance.

    A fresh instance is built on each call; callers construct it once and
    thread it through the pipeline.

    Returns:
        Settings: Application settings loaded from environment
    """
    return Settings()
