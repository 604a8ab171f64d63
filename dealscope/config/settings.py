"""
Application Settings

Read from environment variables and an optional .env file via
pydantic-settings:
- LLMConfig (LLM_*): which chat model answers the prompts, and its credentials
- GatewayConfig (GATEWAY_*): input size limit and retry policy
- Settings (DEALSCOPE_*): application name, logging, plus both groups above
"""

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_FILE = dict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


class LLMProviderType(str, Enum):
    """Chat model backends."""
    GOOGLE_GENAI = "google_genai"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"        # local, no API key


class LLMConfig(BaseSettings):
    """Chat model selection and credentials."""
    model_config = SettingsConfigDict(env_prefix="LLM_", populate_by_name=True, **_ENV_FILE)

    provider: LLMProviderType = LLMProviderType.GOOGLE_GENAI
    model_name: Optional[str] = None    # provider default when unset
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    max_tokens: int = Field(default=8192, gt=0)
    timeout: int = Field(default=120, gt=0)     # seconds

    # Credentials use the providers' conventional variable names
    google_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("google_api_key", "GOOGLE_API_KEY", "GEMINI_API_KEY")
    )
    openai_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("openai_api_key", "OPENAI_API_KEY")
    )
    anthropic_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("anthropic_api_key", "ANTHROPIC_API_KEY")
    )

    ollama_base_url: str = "http://localhost:11434"

    def api_key(self) -> Optional[str]:
        """Secret for the selected provider, None if unset or not needed."""
        secret = {
            LLMProviderType.GOOGLE_GENAI: self.google_api_key,
            LLMProviderType.OPENAI: self.openai_api_key,
            LLMProviderType.ANTHROPIC: self.anthropic_api_key,
        }.get(self.provider)
        return secret.get_secret_value() if secret else None


class GatewayConfig(BaseSettings):
    """Inference gateway limits and retry policy."""
    model_config = SettingsConfigDict(env_prefix="GATEWAY_", **_ENV_FILE)

    max_input_chars: int = Field(default=2_000_000, gt=0)
    max_retries: int = Field(default=3, ge=0)
    initial_retry_delay: float = Field(default=1.0, ge=0.0)  # seconds
    retry_backoff: float = Field(default=2.0, ge=1.0)


class Settings(BaseSettings):
    """Top-level settings."""
    model_config = SettingsConfigDict(env_prefix="DEALSCOPE_", **_ENV_FILE)

    app_name: str = "DealScope"
    debug: bool = False
    json_logs: bool = False

    llm: LLMConfig = Field(default_factory=LLMConfig)
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return Settings()
