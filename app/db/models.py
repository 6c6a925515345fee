"""
SQLAlchemy Database Models.
Defines the users, agents and conversations tables.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text, JSON
from sqlalchemy.orm import relationship

from app.db.database import Base


def _new_id() -> str:
    return uuid4().hex


class User(Base):
    """Account owning agents and conversations."""
    __tablename__ = "users"

    id = Column(String(50), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    agents = relationship("Agent", back_populates="user", lazy="selectin")

    def __repr__(self):
        return f"<User {self.id}: {self.email}>"


class Agent(Base):
    """Stored persona a user can run conversations against."""
    __tablename__ = "agents"

    id = Column(String(50), primary_key=True, default=_new_id)
    user_id = Column(String(50), ForeignKey("users.id"), index=True, nullable=False)

    name = Column(String(255), nullable=False)
    company_name = Column(String(255), nullable=False)
    personality = Column(Text, nullable=False)
    company_info = Column(Text, nullable=False)
    prompts = Column(JSON, default=list)  # List of guideline strings

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="agents")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "companyName": self.company_name,
            "personality": self.personality,
            "companyInfo": self.company_info,
            "prompts": list(self.prompts or []),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None
        }

    def __repr__(self):
        return f"<Agent {self.id}: {self.name} ({self.company_name})>"


class Conversation(Base):
    """Conversation record; messages are stored as an ordered JSON list."""
    __tablename__ = "conversations"

    id = Column(String(50), primary_key=True, default=_new_id)
    user_id = Column(String(50), index=True, nullable=False)
    agent_id = Column(String(50), ForeignKey("agents.id", ondelete="SET NULL"), nullable=True)
    title = Column(String(255), nullable=False)

    messages = Column(JSON, default=list)
    duration = Column(Integer, default=0)
    sentiment = Column(String(20), default="neutral")
    intents = Column(JSON, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<Conversation {self.id}: {self.title}>"
