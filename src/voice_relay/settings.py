"""Runtime configuration loaded from environment variables and .env."""
import sys
from typing import List, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from voice_relay.consts import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_RELOAD, MAX_UPLOAD_BYTES


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        env_parse_none_str='None',
        extra="ignore",
    )

    # Server Configuration
    HOST: str = Field(default=DEFAULT_HOST, description="Server host address")
    PORT: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Server port")
    RELOAD: bool = Field(default=DEFAULT_RELOAD, description="Enable auto-reload in development")
    LOG_LEVEL: str = Field(default="INFO", description="Root log level")
    CORS_ORIGINS: List[str] = Field(default=["*"], description="Origins allowed by the CORS middleware")

    # API Keys
    OPENAI_API_KEY: str = Field(default="", description="OpenAI API key for speech, LLM and TTS calls")

    # Workflow webhook; unset switches /execute into mock mode
    N8N_WEBHOOK_URL: Optional[str] = Field(default=None, description="Automation webhook receiving intents")

    # LLM Configuration
    LLM_MODEL: str = Field(default="gpt-4o-mini", description="OpenAI chat model used for intent parsing")
    LLM_TEMPERATURE: float = Field(default=0.1, ge=0.0, le=2.0, description="Sampling temperature for intent parsing")

    # Speech Configuration
    STT_MODEL: str = Field(default="whisper-1", description="OpenAI transcription model")
    TTS_MODEL: str = Field(default="tts-1", description="OpenAI text-to-speech model")
    TTS_VOICE: str = Field(default="alloy", description="Voice used for synthesized responses")

    # Timeouts
    API_TIMEOUT: float = Field(default=60.0, gt=0, description="Timeout in seconds for OpenAI calls")
    WEBHOOK_TIMEOUT: float = Field(default=30.0, gt=0, description="Timeout in seconds for webhook calls")

    # Upload Configuration
    MAX_UPLOAD_BYTES: int = Field(default=MAX_UPLOAD_BYTES, ge=1, description="Upper bound for uploaded audio")
    UPLOAD_DIR: Optional[str] = Field(
        default=None,
        description="Directory for transient uploads (defaults to the system temp dir).",
    )


def load_settings_or_die() -> Settings:
    try:
        s = Settings()
    except ValidationError as e:
        # One clean message, no scary traceback
        print("[CONFIG ERROR] Invalid environment configuration:", file=sys.stderr)
        for err in e.errors():
            loc = ".".join(str(x) for x in err.get("loc", []))
            msg = err.get("msg", "invalid value")
            print(f"  - {loc}: {msg}", file=sys.stderr)
        sys.exit(2)

    return s

settings = load_settings_or_die()
