"""
Conversation domain objects.
A conversation is an ordered, append-only message list plus metadata.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from uuid import uuid4

from app.config import DEFAULT_SENTIMENT


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the database stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class Message:
    """Single message in a conversation."""
    role: str  # "user", "assistant", "system"
    content: str
    timestamp: datetime = field(default_factory=utcnow)
    audio_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for storage and for API responses."""
        data = {
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat()
        }
        if self.audio_url:
            data["audioUrl"] = self.audio_url
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        return cls(
            role=data["role"],
            content=data.get("content", ""),
            timestamp=_parse_timestamp(data["timestamp"]),
            audio_url=data.get("audioUrl")
        )

    def to_llm_message(self) -> Dict[str, str]:
        """Convert to chat completion message format."""
        return {"role": self.role, "content": self.content}


@dataclass
class ConversationMetadata:
    """Derived bookkeeping for a conversation."""
    duration: int = 0
    sentiment: str = DEFAULT_SENTIMENT
    intents: List[str] = field(default_factory=list)
    created: datetime = field(default_factory=utcnow)
    updated: datetime = field(default_factory=utcnow)

    def merge_intents(self, intents: List[str]):
        """Add new intent tags, keeping first-seen order."""
        for intent in intents:
            if intent not in self.intents:
                self.intents.append(intent)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "duration": self.duration,
            "sentiment": self.sentiment,
            "intents": list(self.intents),
            "created": self.created.isoformat(),
            "updated": self.updated.isoformat()
        }


@dataclass
class Conversation:
    """
    One customer conversation.

    Messages are append-only; insertion order is chronological order.
    System messages stay in storage but are filtered from every public view.
    """
    user_id: str
    title: str
    id: str = field(default_factory=lambda: uuid4().hex)
    agent_id: Optional[str] = None
    messages: List[Message] = field(default_factory=list)
    metadata: ConversationMetadata = field(default_factory=ConversationMetadata)

    def append(self, message: Message):
        """Append a message and refresh the update timestamp."""
        self.messages.append(message)
        self.metadata.updated = max(message.timestamp, self.metadata.created)

    def replace_last(self, message: Message):
        """Swap the most recent message, used to attach synthesized audio."""
        self.messages[-1] = message

    @property
    def system_prompt(self) -> Optional[str]:
        for message in self.messages:
            if message.role == "system":
                return message.content
        return None

    @property
    def public_messages(self) -> List[Message]:
        return [m for m in self.messages if m.role != "system"]

    @property
    def user_message_count(self) -> int:
        return sum(1 for m in self.messages if m.role == "user")

    @property
    def audio_urls(self) -> List[str]:
        return [m.audio_url for m in self.messages if m.audio_url]

    def refresh_duration(self, now: Optional[datetime] = None):
        """Seconds elapsed since creation, truncated."""
        now = now or utcnow()
        self.metadata.duration = max(0, int((now - self.metadata.created).total_seconds()))

    def transcript(self) -> str:
        """Customer-visible exchange, one "role: content" line per message."""
        return "\n".join(f"{m.role}: {m.content}" for m in self.public_messages)

    def to_public_dict(self) -> Dict[str, Any]:
        """Outward view with system messages removed."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "agentId": self.agent_id,
            "title": self.title,
            "messages": [m.to_dict() for m in self.public_messages],
            "metadata": self.metadata.to_dict()
        }
