"""
Configuration module for the LinguaLink service.
Centralizes all environment variables and configuration settings.
"""

from typing import Optional, List
from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict
from enum import Enum


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class TranslationProvider(str, Enum):
    DEEPL = "deepl"


class TranscriptionProvider(str, Enum):
    ASSEMBLYAI = "assemblyai"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    log_level: str = Field(default="INFO")
    environment: Environment = Field(default=Environment.DEVELOPMENT)
    debug: bool = Field(default=False)

    # Database Configuration
    database_url: str = Field(default="sqlite:///./lingualink.db")
    connection_pool_size: int = Field(default=20)

    # Translation Configuration
    translation_provider: TranslationProvider = Field(default=TranslationProvider.DEEPL)
    deepl_api_key: Optional[str] = Field(default=None)
    deepl_server_url: Optional[str] = Field(default=None)
    translation_timeout: int = Field(default=5)

    # Transcription Configuration
    transcription_provider: TranscriptionProvider = Field(default=TranscriptionProvider.ASSEMBLYAI)
    assemblyai_api_key: Optional[str] = Field(default=None)
    assemblyai_base_url: str = Field(default="https://api.assemblyai.com/v2")
    transcription_language: str = Field(default="en")
    transcription_max_attempts: int = Field(default=30)
    transcription_poll_interval: float = Field(default=2.0)

    # RTC Configuration
    agora_app_id: str = Field(default="")
    agora_token: str = Field(default="demo-token-for-agora")

    # Messaging Configuration
    mailbox_capacity: int = Field(default=100)
    mailbox_idle_timeout: float = Field(default=300.0)
    mailbox_sweep_interval: float = Field(default=60.0)
    poll_interval: float = Field(default=2.0)

    # Client Configuration
    api_base_url: str = Field(default="http://localhost:8000")
    request_timeout: int = Field(default=30)

    # Security
    user_id_header: str = Field(default="user-id")
    enable_cors: bool = Field(default=True)
    cors_origins: List[str] = Field(default=["*"])

    # Monitoring
    log_conversation_content: bool = Field(default=False)

    @field_validator("mailbox_capacity")
    @classmethod
    def validate_mailbox_capacity(cls, v):
        if v < 1:
            raise ValueError("Mailbox capacity must be at least 1")
        return v

    @field_validator("transcription_max_attempts")
    @classmethod
    def validate_transcription_attempts(cls, v):
        if v < 1:
            raise ValueError("Transcription polling needs at least one attempt")
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v, info: ValidationInfo):
        """Ensure database URL is properly formatted."""
        if info.data.get("environment") == Environment.PRODUCTION and v.startswith("sqlite"):
            raise ValueError("SQLite should not be used in production")
        return v

    def get_translation_api_key(self) -> Optional[str]:
        """Get the API key for the configured translation provider."""
        if self.translation_provider == TranslationProvider.DEEPL:
            return self.deepl_api_key
        return None

    def get_transcription_api_key(self) -> Optional[str]:
        """Get the API key for the configured transcription provider."""
        if self.transcription_provider == TranscriptionProvider.ASSEMBLYAI:
            return self.assemblyai_api_key
        return None


# Global settings instance
settings = Settings()
