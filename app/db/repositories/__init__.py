"""Database repositories initialization."""

from app.db.repositories.conversations import ConversationRepository
from app.db.repositories.agents import AgentRepository
from app.db.repositories.users import UserRepository

__all__ = [
    "ConversationRepository",
    "AgentRepository",
    "UserRepository"
]
