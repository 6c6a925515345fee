"""
User Repository.
Data access layer for account lookups.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import StorageException
from app.db.database import get_db
from app.db.models import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user data operations."""

    async def get_by_id(self, user_id: str) -> Optional[User]:
        try:
            async with get_db() as db:
                return await db.get(User, user_id)
        except SQLAlchemyError as e:
            raise StorageException("get_user", str(e))

    async def get_by_email(self, email: str) -> Optional[User]:
        try:
            async with get_db() as db:
                result = await db.execute(select(User).where(User.email == email))
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageException("get_user", str(e))

    async def create(self, data: dict) -> User:
        """Create a new user."""
        try:
            async with get_db() as db:
                user = User(**data)
                db.add(user)
                await db.flush()
                return user
        except SQLAlchemyError as e:
            raise StorageException("create_user", str(e))
