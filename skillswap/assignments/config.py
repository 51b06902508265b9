"""Configuration for post-session assignments and question generation.

All settings can be overridden via ``ASSIGNMENTS_*`` environment variables.

Example:
    ASSIGNMENTS_GEMINI_API_KEY=...
    ASSIGNMENTS_CACHE_BACKEND=redis
"""

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AssignmentConfig(BaseSettings):
    """Settings for assignment creation and the question generator."""

    model_config = SettingsConfigDict(
        env_prefix="ASSIGNMENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    question_count: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Questions per assignment",
    )
    min_question_length: int = Field(
        default=10,
        ge=0,
        description="Generated lines shorter than this are discarded",
    )

    # Generative-text API
    gemini_api_key: SecretStr | None = Field(
        default=None,
        description="API key for question generation (unset = static fallback questions)",
    )
    gemini_model: str = Field(
        default="gemini-1.5-flash",
        description="Model used for question generation",
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/models",
        description="Base URL of the generateContent endpoint",
    )
    request_timeout: float = Field(
        default=20.0,
        ge=1.0,
        le=120.0,
        description="Timeout in seconds for generation requests",
    )

    # Question cache
    cache_backend: Literal["memory", "redis", "none"] = Field(
        default="memory",
        description="Where generated question sets are cached",
    )
    cache_ttl_seconds: int = Field(
        default=86400,
        ge=0,
        description="TTL for cached question sets (0 = never expire in memory)",
    )
    cache_max_entries: int = Field(
        default=512,
        ge=1,
        description="Maximum skills held by the in-memory cache (LRU eviction)",
    )
    cache_key_prefix: str = Field(
        default="questions:",
        description="Redis key prefix for cached question sets",
    )
