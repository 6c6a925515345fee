"""
Agent Repository.
Data access layer for stored personas.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import StorageException
from app.db.database import get_db
from app.db.models import Agent

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "company_name", "personality", "company_info", "prompts")


class AgentRepository:
    """Repository for agent data operations."""

    async def get_by_id(self, agent_id: str) -> Optional[Agent]:
        """Get an agent by ID."""
        try:
            async with get_db() as db:
                return await db.get(Agent, agent_id)
        except SQLAlchemyError as e:
            raise StorageException("get_agent", str(e))

    async def get_for_user(self, agent_id: str, user_id: str) -> Optional[Agent]:
        """Get an agent only if it belongs to the user."""
        try:
            async with get_db() as db:
                result = await db.execute(
                    select(Agent).where(Agent.id == agent_id, Agent.user_id == user_id)
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageException("get_agent", str(e))

    async def get_by_user(self, user_id: str) -> List[Agent]:
        """Get a user's agents, newest first."""
        try:
            async with get_db() as db:
                stmt = (
                    select(Agent)
                    .where(Agent.user_id == user_id)
                    .order_by(Agent.created_at.desc())
                )
                result = await db.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StorageException("list_agents", str(e))

    async def create(self, data: dict) -> Agent:
        """Create a new agent."""
        try:
            async with get_db() as db:
                agent = Agent(**data)
                db.add(agent)
                await db.flush()
                await db.refresh(agent)
                return agent
        except SQLAlchemyError as e:
            raise StorageException("create_agent", str(e))

    async def update(self, agent_id: str, user_id: str, data: dict) -> Optional[Agent]:
        """Update an agent owned by the user."""
        try:
            async with get_db() as db:
                result = await db.execute(
                    select(Agent).where(Agent.id == agent_id, Agent.user_id == user_id)
                )
                agent = result.scalar_one_or_none()

                if agent:
                    for key, value in data.items():
                        if key in EDITABLE_FIELDS and value is not None:
                            setattr(agent, key, value)
                    await db.flush()
                    await db.refresh(agent)

                return agent
        except SQLAlchemyError as e:
            raise StorageException("update_agent", str(e))

    async def delete(self, agent_id: str, user_id: str) -> bool:
        """Delete an agent owned by the user."""
        try:
            async with get_db() as db:
                result = await db.execute(
                    select(Agent).where(Agent.id == agent_id, Agent.user_id == user_id)
                )
                agent = result.scalar_one_or_none()
                if agent is None:
                    return False
                await db.delete(agent)
                return True
        except SQLAlchemyError as e:
            raise StorageException("delete_agent", str(e))
