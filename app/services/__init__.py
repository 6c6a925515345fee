"""Services module initialization."""

from app.services.llm import LLMService
from app.services.tts import TTSService
from app.services.audio import AudioStorage
from app.services.livekit import RoomService

__all__ = [
    "LLMService",
    "TTSService",
    "AudioStorage",
    "RoomService"
]
