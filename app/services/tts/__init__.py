"""
Text-to-Speech Service using the OpenAI speech API.
Returns MP3 bytes for agent replies and welcome messages.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

from app.config import get_settings
from app.core.exceptions import TTSException

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass
class TTSResult:
    """Result from text-to-speech synthesis."""
    audio_data: bytes
    voice: str
    processing_time_ms: Optional[float] = None


class TTSService:
    """
    Text-to-Speech gateway.

    Failures are raised as ``TTSException``; callers decide whether a
    missing clip is acceptable.
    """

    def __init__(self, model: Optional[str] = None, default_voice: Optional[str] = None):
        self._client = None
        self._is_initialized = False
        self._model = model or settings.TTS_MODEL_ID
        self._default_voice = default_voice or settings.TTS_DEFAULT_VOICE

    @property
    def is_available(self) -> bool:
        return self._is_initialized

    async def initialize(self):
        """Create the async API client."""
        logger.info("Initializing TTS service...")

        from openai import AsyncOpenAI

        self._client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
        self._is_initialized = True
        logger.info(f"TTS service initialized with model: {self._model}")

    async def synthesize(
        self,
        text: str,
        voice: Optional[str] = None
    ) -> TTSResult:
        """
        Synthesize speech from text.

        Args:
            text: Text to synthesize
            voice: Optional voice identifier

        Returns:
            TTSResult holding MP3 bytes
        """
        if not self._is_initialized:
            raise TTSException("TTS service is not initialized")

        if not text.strip():
            raise TTSException("Cannot synthesize empty text")

        voice = voice or self._default_voice
        start_time = time.time()

        try:
            response = await asyncio.wait_for(
                self._client.audio.speech.create(
                    model=self._model,
                    voice=voice,
                    input=text
                ),
                timeout=settings.TTS_TIMEOUT_SECONDS
            )
            audio_data = response.content
        except asyncio.TimeoutError:
            raise TTSException(
                f"TTS synthesis timed out after {settings.TTS_TIMEOUT_SECONDS} seconds",
                details={"timeout_seconds": settings.TTS_TIMEOUT_SECONDS}
            )
        except Exception as e:
            raise TTSException(f"TTS synthesis failed: {e}", details={"voice": voice})

        return TTSResult(
            audio_data=audio_data,
            voice=voice,
            processing_time_ms=(time.time() - start_time) * 1000
        )

    async def cleanup(self):
        """Cleanup resources."""
        if self._client is not None:
            await self._client.close()
        self._client = None
        self._is_initialized = False
        logger.info("TTS service cleaned up")
