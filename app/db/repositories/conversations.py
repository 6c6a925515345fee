"""
Conversation Repository.
Data access layer mapping conversation rows to domain objects.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.core.conversation import Conversation, ConversationMetadata, Message
from app.core.exceptions import StorageException
from app.db.database import get_db
from app.db.models import Conversation as ConversationRow

logger = logging.getLogger(__name__)


def _to_domain(row: ConversationRow) -> Conversation:
    return Conversation(
        id=row.id,
        user_id=row.user_id,
        agent_id=row.agent_id,
        title=row.title,
        messages=[Message.from_dict(m) for m in (row.messages or [])],
        metadata=ConversationMetadata(
            duration=row.duration or 0,
            sentiment=row.sentiment,
            intents=list(row.intents or []),
            created=row.created_at,
            updated=row.updated_at
        )
    )


def _apply(row: ConversationRow, conversation: Conversation):
    row.user_id = conversation.user_id
    row.agent_id = conversation.agent_id
    row.title = conversation.title
    row.messages = [m.to_dict() for m in conversation.messages]
    row.duration = conversation.metadata.duration
    row.sentiment = conversation.metadata.sentiment
    row.intents = list(conversation.metadata.intents)
    row.created_at = conversation.metadata.created
    row.updated_at = conversation.metadata.updated


class ConversationRepository:
    """Repository for conversation data operations."""

    async def get_by_id(self, conversation_id: str) -> Optional[Conversation]:
        """Get a conversation by ID."""
        try:
            async with get_db() as db:
                row = await db.get(ConversationRow, conversation_id)
                return _to_domain(row) if row else None
        except SQLAlchemyError as e:
            raise StorageException("get_conversation", str(e))

    async def find(
        self,
        user_id: Optional[str] = None,
        agent_id: Optional[str] = None
    ) -> List[Conversation]:
        """Get conversations, newest first, optionally filtered by owner or agent."""
        try:
            async with get_db() as db:
                stmt = select(ConversationRow)
                if user_id is not None:
                    stmt = stmt.where(ConversationRow.user_id == user_id)
                if agent_id is not None:
                    stmt = stmt.where(ConversationRow.agent_id == agent_id)
                stmt = stmt.order_by(ConversationRow.created_at.desc())
                result = await db.execute(stmt)
                return [_to_domain(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StorageException("list_conversations", str(e))

    async def save(self, conversation: Conversation) -> Conversation:
        """Insert or overwrite the full conversation record."""
        try:
            async with get_db() as db:
                row = await db.get(ConversationRow, conversation.id)
                if row is None:
                    row = ConversationRow(id=conversation.id)
                    db.add(row)
                _apply(row, conversation)
                await db.flush()
        except SQLAlchemyError as e:
            raise StorageException("save_conversation", str(e))

        return conversation

    async def delete(self, conversation_id: str) -> Optional[Conversation]:
        """Delete a conversation and return what was removed."""
        try:
            async with get_db() as db:
                row = await db.get(ConversationRow, conversation_id)
                if row is None:
                    return None
                conversation = _to_domain(row)
                await db.delete(row)
                return conversation
        except SQLAlchemyError as e:
            raise StorageException("delete_conversation", str(e))
