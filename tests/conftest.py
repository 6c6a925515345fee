"""
Shared fixtures.
Settings are read at import time, so the environment is prepared before any
``app`` module is imported.
"""

import os
import tempfile
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="conversai-tests-"))

os.environ.setdefault("OPENAI_API_KEY", "sk-test")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["AUDIO_DIR"] = str(_TMP / "audio")
os.environ["AGENT_LOG_PATH"] = str(_TMP / "agent_log.md")
os.environ["JWT_SECRET"] = "test-secret-for-conversai-0123456789"
os.environ["SENTIMENT_STRATEGY"] = "llm"
os.environ["LIVEKIT_API_KEY"] = ""
os.environ["LIVEKIT_API_SECRET"] = ""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from app.core.exceptions import LLMAPIException, TTSException
from app.core.session import ConversationSessionService
from app.db.database import init_db, close_db
from app.db.repositories import AgentRepository, ConversationRepository
from app.services.audio import AudioStorage
from app.services.llm import LLMResponse
from app.services.tts import TTSResult


class FakeLLM:
    """Stand-in for LLMService with scripted answers and call records."""

    def __init__(self, reply="Happy to help with that.", sentiment="neutral", title="Order Cancellation Request"):
        self.reply = reply
        self.sentiment = sentiment
        self.title = title
        self.fail = False
        self.completions = []
        self.sentiment_calls = []
        self.title_calls = []

    async def complete(self, messages, **kwargs):
        self.completions.append(messages)
        if self.fail:
            raise LLMAPIException("upstream down")
        return LLMResponse(content=self.reply)

    async def classify_sentiment(self, user_messages):
        self.sentiment_calls.append(list(user_messages))
        if self.fail:
            raise LLMAPIException("upstream down")
        return self.sentiment

    async def generate_title(self, transcript):
        self.title_calls.append(transcript)
        if self.fail:
            raise LLMAPIException("upstream down")
        return f'"{self.title}"'


class FakeTTS:
    """Stand-in for TTSService returning a few fixed bytes."""

    def __init__(self):
        self.fail = False
        self.calls = []

    async def synthesize(self, text, voice=None):
        self.calls.append((text, voice))
        if self.fail:
            raise TTSException("speech down")
        return TTSResult(audio_data=b"ID3-fake-mp3", voice=voice or "alloy")


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def fake_tts():
    return FakeTTS()


@pytest.fixture
def audio_storage(tmp_path):
    return AudioStorage(audio_dir=tmp_path / "audio", url_prefix="/audio")


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory database per test."""
    await init_db("sqlite+aiosqlite:///:memory:")
    yield
    await close_db()


@pytest_asyncio.fixture
async def session_service(db, fake_llm, fake_tts, audio_storage):
    return ConversationSessionService(
        repository=ConversationRepository(),
        llm_service=fake_llm,
        tts_service=fake_tts,
        audio_storage=audio_storage,
        agent_repository=AgentRepository(),
        sentiment_strategy="llm",
        context_window=5,
        title_interval=3
    )


@pytest.fixture
def client(fake_llm, fake_tts):
    """App client with the model gateway replaced by fakes."""
    from app.main import app

    with TestClient(app) as test_client:
        app.state.session_service = ConversationSessionService(
            repository=ConversationRepository(),
            llm_service=fake_llm,
            tts_service=fake_tts,
            audio_storage=app.state.audio_storage,
            agent_repository=AgentRepository(),
            agent_logger=app.state.agent_logger,
            sentiment_strategy="llm"
        )
        yield test_client
