from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class OpenAIConfig(BaseSettings):
    """OpenAI provider configuration."""

    api_key: SecretStr | None = Field(
        default=None,
        validation_alias="OPENAI_API_KEY",
    )
    base_url: Optional[str] = Field(
        default=None,
        validation_alias="OPENAI_BASE_URL",
    )
    chat_model: str = Field(
        default="gpt-4o-mini",
        validation_alias="OPENAI_CHAT_MODEL",
    )
    transcription_model: str = Field(
        default="whisper-1",
        validation_alias="OPENAI_TRANSCRIPTION_MODEL",
    )
    agent_model: str = Field(
        default="gpt-4o-mini",
        validation_alias="OPENAI_AGENT_MODEL",
    )
    timeout_seconds: float = Field(
        default=60.0,
        validation_alias="OPENAI_TIMEOUT_SECONDS",
        gt=0,
    )
    client_cache_size: int = Field(
        default=8,
        validation_alias="OPENAI_CLIENT_CACHE_SIZE",
        ge=1,
        le=256,
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "English Speaking Practice API"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/speaking_pipeline.log"
    transcript_log_file: str = "logs/transcripts.log"

    # Whisper rejects uploads above 25 MB.
    max_upload_bytes: int = Field(default=25 * 1024 * 1024, ge=1)

    # OpenAI
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = False
    cors_allow_methods: list[str] = ["GET", "POST", "OPTIONS"]
    cors_allow_headers: list[str] = ["Content-Type", "X-OpenAI-Api-Key"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
