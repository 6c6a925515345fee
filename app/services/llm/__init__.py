"""
LLM Service using the OpenAI chat API.
Generates agent replies, one-word sentiment labels, and conversation titles.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional, List, Dict

from app.config import get_settings
from app.core.exceptions import (
    ConfigurationException,
    LLMException,
    LLMAPIException,
    LLMTimeoutException,
    LLMRateLimitException
)

logger = logging.getLogger(__name__)
settings = get_settings()


SENTIMENT_PROMPT = """Analyze the sentiment of the customer's messages. Consider factors like:
- Tone and language used
- Urgency of the issue
- Level of satisfaction or frustration
- Use of emotional words or punctuation

Respond with exactly one word:
- positive: Customer is satisfied, happy, or expressing gratitude
- negative: Customer is dissatisfied, frustrated, or angry
- urgent: Customer has a time-sensitive issue or emergency
- neutral: Customer is asking questions or making neutral statements"""


TITLE_PROMPT = """Generate a concise, descriptive title for this customer service conversation. The title should:
1. Focus on the main issue or resolution
2. Be specific but brief (3-6 words)
3. Include the company or service name if relevant
4. Be written in title case
5. Contain only the title, without quotes

Examples:
- "Account Access Issue Resolved"
- "Amazon Refund Request"
- "Cardiology Appointment Booking"
- "Subscription Cancellation Processed\""""


@dataclass
class LLMResponse:
    """Response from LLM completion."""
    content: str
    finish_reason: Optional[str] = None
    usage: Optional[Dict[str, int]] = None
    processing_time_ms: Optional[float] = None


class LLMService:
    """
    Chat completion gateway.

    Uses ``AsyncOpenAI`` by default; ``LLM_PROVIDER=groq`` switches the
    reply model to Groq's OpenAI-compatible client. Every failure is raised
    as an ``LLMException`` so callers can choose their own fallback.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        title_model: Optional[str] = None,
        timeout_seconds: Optional[float] = None
    ):
        self._client = None
        self._is_initialized = False
        self._model = model or settings.LLM_MODEL_ID
        self._title_model = title_model or settings.TITLE_MODEL_ID
        self._timeout = timeout_seconds or settings.LLM_TIMEOUT_SECONDS

    @property
    def is_available(self) -> bool:
        return self._is_initialized

    async def initialize(self):
        """Create the async API client."""
        logger.info("Initializing LLM service...")

        if settings.LLM_PROVIDER == "groq":
            from groq import AsyncGroq

            if not settings.GROQ_API_KEY:
                raise ConfigurationException("GROQ_API_KEY")

            self._client = AsyncGroq(api_key=settings.GROQ_API_KEY)
        else:
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)

        self._is_initialized = True
        logger.info(f"LLM service initialized ({settings.LLM_PROVIDER}) with model: {self._model}")

    async def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 0.8,
        max_tokens: int = 500
    ) -> LLMResponse:
        """
        Generate a complete response.

        Args:
            messages: Conversation messages, system prompt first
            model: Override the configured reply model
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate

        Returns:
            LLMResponse with the reply text
        """
        if not self._is_initialized:
            raise LLMException("LLM service is not initialized")

        start_time = time.time()

        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=model or self._model,
                    messages=messages,
                    temperature=temperature,
                    max_tokens=max_tokens
                ),
                timeout=self._timeout
            )
        except asyncio.TimeoutError:
            raise LLMTimeoutException(self._timeout)
        except Exception as e:
            if "rate_limit" in str(e).lower() or "rate limit" in str(e).lower():
                raise LLMRateLimitException()
            raise LLMAPIException(str(e))

        if not response.choices:
            raise LLMAPIException("Empty completion")
        choice = response.choices[0]
        usage = None
        if getattr(response, "usage", None):
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens
            }

        return LLMResponse(
            content=(choice.message.content or "").strip(),
            finish_reason=choice.finish_reason,
            usage=usage,
            processing_time_ms=(time.time() - start_time) * 1000
        )

    async def classify_sentiment(self, user_messages: List[str]) -> str:
        """Ask for a single-word sentiment label over the customer's messages."""
        response = await self.complete(
            [
                {"role": "system", "content": SENTIMENT_PROMPT},
                {"role": "user", "content": "\n".join(user_messages)}
            ],
            model=self._title_model,
            temperature=0.3,
            max_tokens=10
        )
        return response.content

    async def generate_title(self, transcript: str) -> str:
        """Ask for a short title describing the conversation."""
        response = await self.complete(
            [
                {"role": "system", "content": TITLE_PROMPT},
                {"role": "user", "content": f"Please generate a title for this conversation:\n\n{transcript}"}
            ],
            model=self._title_model,
            temperature=0.7,
            max_tokens=60
        )
        return response.content

    async def cleanup(self):
        """Cleanup resources."""
        if self._client is not None and hasattr(self._client, "close"):
            await self._client.close()
        self._client = None
        self._is_initialized = False
        logger.info("LLM service cleaned up")
