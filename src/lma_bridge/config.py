"""Configuration system for LMA Bridge.

This module provides Pydantic Settings-based configuration with environment
variable support and sensible defaults for document analysis.

Usage:
    from lma_bridge.config import LMABridgeConfig

    # Load from environment variables and .env file
    config = LMABridgeConfig()

    # Which extraction strategy the caller should use
    print(config.extraction.strategy)

    # Remote model settings
    print(config.llm.model)
"""

from enum import Enum
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExtractionStrategy(str, Enum):
    """Available loan extraction strategies."""

    LOCAL = "local"
    REMOTE = "remote"


class LLMConfig(BaseSettings):
    """Remote model settings for the LLM extraction path.

    Environment Variables:
        LMA_BRIDGE_LLM_MODEL: Model identifier
        LMA_BRIDGE_LLM_API_KEY: API key (falls back to ANTHROPIC_API_KEY)
        LMA_BRIDGE_LLM_TEMPERATURE: Sampling temperature (0.0-1.0)
        LMA_BRIDGE_LLM_MAX_TOKENS: Maximum output tokens
        LMA_BRIDGE_LLM_TIMEOUT: Request timeout in seconds
        LMA_BRIDGE_LLM_MAX_PROMPT_CHARS: Document characters sent to the model
    """

    model_config = SettingsConfigDict(
        env_prefix="LMA_BRIDGE_LLM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Model identifier for the remote extractor",
    )
    api_key: Optional[str] = Field(
        default=None,
        description="API key for the model provider",
    )
    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Sampling temperature for generation",
    )
    max_tokens: int = Field(
        default=1024,
        gt=0,
        le=8192,
        description="Maximum tokens in the model response",
    )
    timeout: float = Field(
        default=60.0,
        gt=0,
        description="Request timeout in seconds",
    )
    max_prompt_chars: int = Field(
        default=30000,
        gt=0,
        description="Maximum document characters included in the prompt",
    )

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str) -> str:
        """Ensure model name is not empty."""
        if not v or not v.strip():
            raise ValueError("Model name cannot be empty")
        return v.strip()


class ExtractionConfig(BaseSettings):
    """Extraction behaviour settings.

    Environment Variables:
        LMA_BRIDGE_EXTRACTION_STRATEGY: local or remote
        LMA_BRIDGE_EXTRACTION_MAX_DOCUMENT_CHARS: Input length limit
        LMA_BRIDGE_EXTRACTION_FALLBACK_TO_LOCAL: Use the pattern engine when
            the remote path fails
        LMA_BRIDGE_EXTRACTION_MAX_RETRIES: Remote retry attempts
        LMA_BRIDGE_EXTRACTION_RETRY_DELAY: Delay between retries in seconds
    """

    model_config = SettingsConfigDict(
        env_prefix="LMA_BRIDGE_EXTRACTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    strategy: ExtractionStrategy = Field(
        default=ExtractionStrategy.LOCAL,
        description="Which extractor the caller runs first",
    )
    max_document_chars: int = Field(
        default=100000,
        gt=0,
        description="Documents longer than this are rejected before extraction",
    )
    fallback_to_local: bool = Field(
        default=True,
        description="Fall back to the pattern engine if the remote path fails",
    )
    max_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Retry attempts for transient remote failures",
    )
    retry_delay: float = Field(
        default=1.0,
        ge=0,
        description="Delay between retry attempts in seconds",
    )


class LMABridgeConfig(BaseSettings):
    """Root configuration for LMA Bridge.

    Environment Variables:
        LMA_BRIDGE_ENV: Environment name (development, staging, production, test)
        LMA_BRIDGE_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

    Example:
        config = LMABridgeConfig(
            extraction=ExtractionConfig(strategy=ExtractionStrategy.REMOTE),
        )
        if config.extraction.strategy is ExtractionStrategy.REMOTE:
            print(f"Using model: {config.llm.model}")
    """

    model_config = SettingsConfigDict(
        env_prefix="LMA_BRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    llm: LLMConfig = Field(default_factory=LLMConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"

    @property
    def uses_remote_extraction(self) -> bool:
        """Check if the remote model path is the selected strategy."""
        return self.extraction.strategy == ExtractionStrategy.REMOTE
