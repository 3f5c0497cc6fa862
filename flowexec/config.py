"""Application configuration using pydantic-settings.

All configuration is loaded from environment variables with sensible defaults.
Secrets should NEVER be logged or exposed in error messages.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Executor settings loaded from environment variables.

    Provider API keys are optional here: a run may supply its own
    credential map, and a missing key only fails the AI node that needs it.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # AI providers
    anthropic_api_key: SecretStr | None = Field(default=None, description="Claude API key")
    openai_api_key: SecretStr | None = Field(default=None, description="OpenAI API key")
    deepseek_api_key: SecretStr | None = Field(default=None, description="DeepSeek API key")
    zhipu_api_key: SecretStr | None = Field(default=None, description="Zhipu API key")

    anthropic_base_url: str = Field(default="https://api.anthropic.com/v1")
    anthropic_version: str = Field(default="2023-06-01")
    openai_base_url: str = Field(default="https://api.openai.com/v1")
    deepseek_base_url: str = Field(default="https://api.deepseek.com/v1")
    zhipu_base_url: str = Field(default="https://open.bigmodel.cn/api/paas/v4")

    llm_timeout: float = Field(default=60.0, gt=0, le=600)

    # Execution
    http_timeout: float = Field(
        default=30.0,
        gt=0,
        le=600,
        description="Default timeout for HTTP node requests in seconds",
    )
    node_timeout: float = Field(
        default=120.0,
        gt=0,
        le=3600,
        description="Maximum time a single node may run in seconds",
    )
    execution_timeout: float = Field(
        default=300.0,
        gt=0,
        le=3600,
        description="Maximum workflow execution time in seconds",
    )
    enforce_condition_branches: bool = Field(
        default=False,
        description="Only follow the condition branch matching the evaluated result",
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)
    debug: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed origins",
    )

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: str) -> str:
        """Validate CORS origins format."""
        origins = [o.strip() for o in v.split(",") if o.strip()]
        if not origins:
            raise ValueError("At least one CORS origin must be specified")
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def get_secret(self, key_name: str) -> str | None:
        """Return the plain value of a secret setting, or None if unset or empty."""
        secret = getattr(self, key_name, None)
        if secret is None:
            return None
        value = secret.get_secret_value() if isinstance(secret, SecretStr) else str(secret)
        return value or None

    def get_masked_key(self, key_name: str) -> str:
        """Get a masked version of a secret key for logging.

        Only shows first 8 characters followed by '...'
        """
        value = self.get_secret(key_name)
        if value is None:
            return "<not set>"
        if len(value) <= 8:
            return "***"
        return f"{value[:8]}..."


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded once and cached for the application lifetime.
    """
    return Settings()


settings = get_settings()
