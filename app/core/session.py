"""
Conversation Session Service.
Owns the message sequence of each conversation: appends turns, derives
metadata, and decides when to call the model gateway for titles and speech.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any, List

from app.config import get_settings, DEFAULT_SENTIMENT, FALLBACK_REPLY, FALLBACK_TITLE, SENTIMENTS
from app.core.conversation import Conversation, Message, utcnow
from app.core.exceptions import (
    AgentNotFoundException,
    ConversationNotFoundException,
    LLMException,
    TTSException,
    ValidationException
)
from app.core.heuristics import (
    KeywordCompanyDetector,
    KeywordSentimentScorer,
    RegexIntentClassifier,
    clean_title,
    normalize_sentiment,
    should_regenerate_title
)
from app.core.persona import DEMO_PERSONA, Persona, build_welcome_message, resolve_system_prompt

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass
class TurnMetrics:
    """Latencies for a single user turn."""
    start_time: float = field(default_factory=time.time)
    llm_start: Optional[float] = None
    llm_end: Optional[float] = None
    title_start: Optional[float] = None
    title_end: Optional[float] = None
    tts_start: Optional[float] = None
    tts_end: Optional[float] = None
    end_time: Optional[float] = None

    @staticmethod
    def _span(start: Optional[float], end: Optional[float]) -> Optional[float]:
        if start and end:
            return (end - start) * 1000
        return None

    @property
    def llm_latency_ms(self) -> Optional[float]:
        return self._span(self.llm_start, self.llm_end)

    @property
    def title_latency_ms(self) -> Optional[float]:
        return self._span(self.title_start, self.title_end)

    @property
    def tts_latency_ms(self) -> Optional[float]:
        return self._span(self.tts_start, self.tts_end)

    @property
    def total_latency_ms(self) -> float:
        return ((self.end_time or time.time()) - self.start_time) * 1000

    def to_dict(self) -> Dict[str, Any]:
        return {
            "llm_latency_ms": self.llm_latency_ms,
            "title_latency_ms": self.title_latency_ms,
            "tts_latency_ms": self.tts_latency_ms,
            "total_latency_ms": self.total_latency_ms
        }


@dataclass
class TurnResult:
    """Outcome of appending one user message."""
    conversation_id: str
    reply: Message
    title: str
    title_updated: bool
    sentiment: str
    intents: List[str]
    company: str = "general"
    metrics: TurnMetrics = field(default_factory=TurnMetrics)

    @property
    def reply_text(self) -> str:
        return self.reply.content

    @property
    def reply_audio_url(self) -> Optional[str]:
        return self.reply.audio_url


class ConversationSessionService:
    """
    Conversation lifecycle on top of a repository and the model gateway.

    Every load-mutate-persist sequence for a conversation runs under that
    conversation's lock, so concurrent submissions to the same id are applied
    one after another.
    """

    def __init__(
        self,
        repository,
        llm_service,
        tts_service,
        audio_storage,
        agent_repository=None,
        agent_logger=None,
        demo_persona: Persona = DEMO_PERSONA,
        intent_classifier: Optional[RegexIntentClassifier] = None,
        company_detector: Optional[KeywordCompanyDetector] = None,
        sentiment_scorer: Optional[KeywordSentimentScorer] = None,
        sentiment_strategy: Optional[str] = None,
        context_window: Optional[int] = None,
        title_interval: Optional[int] = None
    ):
        self.repository = repository
        self.llm = llm_service
        self.tts = tts_service
        self.audio = audio_storage
        self.agents = agent_repository
        self.agent_logger = agent_logger
        self.demo_persona = demo_persona
        self.intent_classifier = intent_classifier or RegexIntentClassifier()
        self.company_detector = company_detector or KeywordCompanyDetector()
        self.sentiment_scorer = sentiment_scorer or KeywordSentimentScorer()
        self.sentiment_strategy = sentiment_strategy or settings.SENTIMENT_STRATEGY
        self.context_window = context_window or settings.CONTEXT_WINDOW_SIZE
        self.title_interval = title_interval or settings.TITLE_REFRESH_INTERVAL

        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    @asynccontextmanager
    async def _locked(self, conversation_id: str):
        """Serialize work on one conversation; the lock lives only while in use."""
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = self._locks[conversation_id] = asyncio.Lock()
        self._lock_users[conversation_id] = self._lock_users.get(conversation_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._lock_users[conversation_id] - 1
            if remaining:
                self._lock_users[conversation_id] = remaining
            else:
                del self._lock_users[conversation_id]
                del self._locks[conversation_id]

    async def _load(self, conversation_id: str) -> Conversation:
        conversation = await self.repository.get_by_id(conversation_id)
        if conversation is None:
            raise ConversationNotFoundException(conversation_id)
        return conversation

    # =========================
    # Persona lookup
    # =========================

    async def persona_for_agent(self, agent_id: str) -> Persona:
        """Load a stored agent and turn it into a persona."""
        agent = await self.agents.get_by_id(agent_id) if self.agents else None
        if agent is None:
            raise AgentNotFoundException(agent_id)
        return Persona.from_agent(agent)

    # =========================
    # Gateway helpers
    # =========================

    async def _speak(self, text: str, voice: Optional[str] = None, prefix: str = "response") -> Optional[str]:
        """Synthesize and store speech; None when either step fails."""
        try:
            result = await self.tts.synthesize(text, voice=voice)
            return await self.audio.save(result.audio_data, prefix=prefix)
        except TTSException as e:
            logger.warning(f"Speech synthesis failed, continuing without audio: {e.message}")
        except OSError as e:
            logger.error(f"Failed to store synthesized audio: {e}")
        return None

    async def _score_sentiment(self, conversation: Conversation) -> str:
        user_messages = [m.content for m in conversation.messages if m.role == "user"]
        if not user_messages:
            return DEFAULT_SENTIMENT

        if self.sentiment_strategy == "keywords":
            return self.sentiment_scorer.score(" ".join(user_messages))

        try:
            raw = await self.llm.classify_sentiment(user_messages)
        except LLMException as e:
            logger.warning(f"Sentiment classification failed: {e.message}")
            return DEFAULT_SENTIMENT
        return normalize_sentiment(raw)

    async def _reply(self, conversation: Conversation) -> str:
        context = [m.to_llm_message() for m in conversation.public_messages[-self.context_window:]]
        system_prompt = conversation.system_prompt
        if system_prompt:
            context.insert(0, {"role": "system", "content": system_prompt})

        try:
            response = await self.llm.complete(context)
        except LLMException as e:
            logger.warning(f"Completion failed, using fallback reply: {e.message}")
            return FALLBACK_REPLY
        return response.content or FALLBACK_REPLY

    async def _regenerate_title(self, conversation: Conversation) -> bool:
        """Ask for a fresh title; the current one is kept on failure."""
        try:
            raw = await self.llm.generate_title(conversation.transcript())
        except LLMException as e:
            logger.warning(f"Title generation failed, keeping '{conversation.title}': {e.message}")
            return False

        title = clean_title(raw)
        if not title or title == conversation.title:
            return False

        old_title = conversation.title
        conversation.title = title
        if self.agent_logger:
            await self.agent_logger.log_title_updated(conversation.id, old_title, title)
        return True

    # =========================
    # Lifecycle
    # =========================

    async def create(
        self,
        user_id: str,
        persona: Optional[Persona] = None,
        is_simulated: bool = False,
        agent_id: Optional[str] = None,
        title: Optional[str] = None
    ) -> Conversation:
        """
        Start a conversation with a system prompt and a spoken welcome.

        Args:
            user_id: Owner of the conversation
            persona: Agent persona; required unless simulated
            is_simulated: Use the demo persona for call practice
            agent_id: Stored agent the persona came from
            title: Initial title for agent conversations

        Returns:
            The persisted conversation
        """
        if not user_id:
            raise ValidationException("userId is required")

        system_prompt = resolve_system_prompt(is_simulated, persona, self.demo_persona)
        active = self.demo_persona if is_simulated else persona
        now = utcnow()

        if is_simulated:
            title = self.demo_persona.title or FALLBACK_TITLE
        else:
            title = title or f"Chat from {datetime.now():%Y-%m-%d}"

        welcome_text = build_welcome_message(is_simulated, persona, self.demo_persona)
        audio_url = await self._speak(welcome_text, voice=active.voice_id, prefix="welcome")

        conversation = Conversation(user_id=user_id, agent_id=agent_id, title=title)
        conversation.metadata.created = now
        conversation.append(Message(role="system", content=system_prompt, timestamp=now))
        conversation.append(Message(role="assistant", content=welcome_text, timestamp=now, audio_url=audio_url))

        await self.repository.save(conversation)

        logger.info(f"Created conversation {conversation.id} for user {user_id}")
        if self.agent_logger:
            await self.agent_logger.log_conversation_started(
                conversation.id, user_id, conversation.title, active.summary(), is_simulated
            )
        return conversation

    async def append_user_message(
        self,
        conversation_id: str,
        content: str,
        audio_url: Optional[str] = None
    ) -> TurnResult:
        """
        Append a customer message and the agent's reply.

        Upstream failures never fail the turn: the reply falls back to an
        apology, sentiment to neutral, the title to its previous value, and
        the reply audio to none.
        """
        if not content or not content.strip():
            raise ValidationException("Message content is required")

        async with self._locked(conversation_id):
            conversation = await self._load(conversation_id)
            metrics = TurnMetrics()

            conversation.append(Message(role="user", content=content, audio_url=audio_url))

            conversation.metadata.sentiment = await self._score_sentiment(conversation)
            intents = self.intent_classifier.classify(content)
            conversation.metadata.merge_intents(intents)
            conversation.refresh_duration()

            metrics.llm_start = time.time()
            reply_text = await self._reply(conversation)
            metrics.llm_end = time.time()

            conversation.append(Message(role="assistant", content=reply_text))

            title_updated = False
            if should_regenerate_title(conversation.user_message_count, self.title_interval):
                metrics.title_start = time.time()
                title_updated = await self._regenerate_title(conversation)
                metrics.title_end = time.time()

            metrics.tts_start = time.time()
            reply_audio_url = await self._speak(reply_text)
            metrics.tts_end = time.time()

            reply = conversation.messages[-1]
            if reply_audio_url:
                reply = Message(
                    role=reply.role,
                    content=reply.content,
                    timestamp=reply.timestamp,
                    audio_url=reply_audio_url
                )
                conversation.replace_last(reply)

            await self.repository.save(conversation)
            metrics.end_time = time.time()

        if self.agent_logger:
            await self.agent_logger.log_turn_complete(
                conversation.id,
                content,
                reply_text,
                conversation.metadata.sentiment,
                list(conversation.metadata.intents),
                metrics.to_dict()
            )

        return TurnResult(
            conversation_id=conversation.id,
            reply=reply,
            title=conversation.title,
            title_updated=title_updated,
            sentiment=conversation.metadata.sentiment,
            intents=list(conversation.metadata.intents),
            company=self.detect_company(conversation),
            metrics=metrics
        )

    async def update_title(self, conversation_id: str) -> str:
        """Regenerate the title from the full transcript."""
        async with self._locked(conversation_id):
            conversation = await self._load(conversation_id)
            if await self._regenerate_title(conversation):
                await self.repository.save(conversation)
            return conversation.title

    async def end_conversation(self, conversation_id: str) -> Conversation:
        """
        Finalize the title. Ending is advisory: later appends are still
        accepted, and ending twice is harmless.
        """
        async with self._locked(conversation_id):
            conversation = await self._load(conversation_id)
            conversation.refresh_duration()
            await self._regenerate_title(conversation)
            await self.repository.save(conversation)

        logger.info(f"Ended conversation {conversation_id}")
        return conversation

    async def delete_conversation(self, conversation_id: str) -> Conversation:
        """Remove the conversation and every audio file it referenced."""
        async with self._locked(conversation_id):
            conversation = await self.repository.delete(conversation_id)
            if conversation is None:
                raise ConversationNotFoundException(conversation_id)
            removed = self.audio.delete_many(conversation.audio_urls)

        logger.info(f"Deleted conversation {conversation_id} ({removed} audio files)")
        if self.agent_logger:
            await self.agent_logger.log_conversation_deleted(conversation_id, removed)
        return conversation

    # =========================
    # Reads
    # =========================

    async def list_conversations(
        self,
        agent_id: Optional[str] = None,
        user_id: Optional[str] = None
    ) -> List[Conversation]:
        return await self.repository.find(user_id=user_id, agent_id=agent_id)

    async def get_conversation(self, conversation_id: str) -> Conversation:
        return await self._load(conversation_id)

    async def get_messages(self, conversation_id: str) -> List[Message]:
        conversation = await self._load(conversation_id)
        return conversation.public_messages

    def detect_company(self, conversation: Conversation) -> str:
        return self.company_detector.detect(m.content for m in conversation.messages)

    async def compute_user_stats(self, user_id: str) -> Dict[str, Any]:
        """Aggregate practice statistics across a user's conversations."""
        conversations = await self.repository.find(user_id=user_id)

        breakdown = {sentiment: 0 for sentiment in SENTIMENTS}
        companies: List[str] = []
        total_messages = 0

        for conversation in conversations:
            sentiment = conversation.metadata.sentiment
            if sentiment in breakdown:
                breakdown[sentiment] += 1
            total_messages += len(conversation.public_messages)

            company = self.detect_company(conversation)
            if company not in companies:
                companies.append(company)

        average_duration = 0
        last_practice = None
        if conversations:
            total_duration = sum(c.metadata.duration for c in conversations)
            average_duration = round(total_duration / len(conversations))
            last_practice = max(c.metadata.updated for c in conversations).isoformat()

        return {
            "totalCalls": len(conversations),
            "averageDuration": average_duration,
            "lastPractice": last_practice,
            "sentimentBreakdown": breakdown,
            "totalMessages": total_messages,
            "companiesInteractedWith": companies
        }
