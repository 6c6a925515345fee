"""Database module initialization."""

from app.db.database import init_db, close_db, get_db
from app.db.models import User, Agent, Conversation

__all__ = [
    "init_db",
    "close_db",
    "get_db",
    "User",
    "Agent",
    "Conversation"
]
