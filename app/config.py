"""
Configuration management for ConversAI.
Loads settings from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Optional, List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # =========================
    # Application Settings
    # =========================
    APP_NAME: str = "ConversAI"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = Field(default=False, description="Enable debug mode")
    ENVIRONMENT: str = Field(default="development", description="Environment name")

    # =========================
    # API Keys
    # =========================
    OPENAI_API_KEY: str = Field(..., description="OpenAI API key for chat and speech")
    LLM_PROVIDER: str = Field(default="openai", description="Chat completion provider: openai or groq")
    GROQ_API_KEY: Optional[str] = Field(default=None, description="Groq API key when LLM_PROVIDER=groq")

    # =========================
    # Server Settings
    # =========================
    HOST: str = Field(default="0.0.0.0", description="Server host")
    PORT: int = Field(default=5001, description="Server port")
    WORKERS: int = Field(default=1, description="Number of workers")
    FRONTEND_URL: str = Field(default="http://localhost:3000", description="Allowed CORS origin")

    # =========================
    # Database Settings
    # =========================
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./data/conversai.db",
        description="Database connection URL"
    )
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL queries")

    # =========================
    # Model Settings
    # =========================
    LLM_MODEL_ID: str = Field(default="gpt-3.5-turbo", description="Chat model for agent replies")
    TITLE_MODEL_ID: str = Field(default="gpt-3.5-turbo", description="Chat model for titles and sentiment")
    TTS_MODEL_ID: str = Field(default="tts-1", description="Speech synthesis model")
    TTS_DEFAULT_VOICE: str = Field(default="alloy", description="Speech synthesis voice")

    # =========================
    # Audio Settings
    # =========================
    AUDIO_DIR: Path = Field(default=Path("./public/audio"), description="Directory for audio files")
    AUDIO_URL_PREFIX: str = Field(default="/audio", description="URL prefix audio is served under")

    # =========================
    # Conversation Settings
    # =========================
    CONTEXT_WINDOW_SIZE: int = Field(
        default=5,
        description="Number of recent messages to include in LLM context"
    )
    TITLE_REFRESH_INTERVAL: int = Field(
        default=3,
        description="Regenerate the title every N user messages"
    )
    SENTIMENT_STRATEGY: str = Field(
        default="llm",
        description="Sentiment source: llm or keywords"
    )

    # =========================
    # Latency Settings
    # =========================
    LLM_TIMEOUT_SECONDS: float = Field(default=30.0, description="LLM API timeout")
    TTS_TIMEOUT_SECONDS: float = Field(default=30.0, description="TTS API timeout")

    # =========================
    # Auth Settings
    # =========================
    JWT_SECRET: str = Field(default="your-secret-key", description="Bearer token signing secret")
    JWT_ALGORITHM: str = Field(default="HS256", description="Bearer token algorithm")
    JWT_EXPIRY_MINUTES: int = Field(default=60 * 24 * 7, description="Bearer token lifetime")

    # =========================
    # LiveKit Settings
    # =========================
    LIVEKIT_API_KEY: str = Field(default="", description="LiveKit API key")
    LIVEKIT_API_SECRET: str = Field(default="", description="LiveKit API secret")
    LIVEKIT_URL: str = Field(default="conversai-livekit.livekit.cloud", description="LiveKit host")

    # =========================
    # Logging Settings
    # =========================
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    AGENT_LOG_PATH: Path = Field(
        default=Path("./logs/agent_log.md"),
        description="Path to agent markdown log"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Message roles
MESSAGE_ROLES = ["user", "assistant", "system"]

# Sentiment buckets
SENTIMENTS = ["positive", "negative", "neutral", "urgent"]
DEFAULT_SENTIMENT = "neutral"

# Companies recognised in conversation text
KNOWN_COMPANIES: List[str] = [
    "amazon",
    "netflix",
    "pizza hut",
    "apple"
]

# Fallback texts
FALLBACK_REPLY = (
    "I'm sorry, I'm having trouble responding right now. "
    "Could you please say that again?"
)
FALLBACK_TITLE = "Customer Service Conversation"
