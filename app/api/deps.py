"""Shared request dependencies."""

from typing import Optional

from fastapi import Header, Request

from app.core.exceptions import AuthenticationException
from app.core.security import decode_access_token
from app.core.session import ConversationSessionService
from app.db.models import User
from app.db.repositories import UserRepository
from app.services.livekit import RoomService


def get_session_service(request: Request) -> ConversationSessionService:
    return request.app.state.session_service


def get_room_service(request: Request) -> RoomService:
    return request.app.state.room_service


async def get_current_user(authorization: Optional[str] = Header(default=None)) -> User:
    """Resolve ``Authorization: Bearer <token>`` to a stored user."""
    if not authorization:
        raise AuthenticationException("missing Authorization header")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationException("expected a Bearer token")

    user_id = decode_access_token(token.strip())
    user = await UserRepository().get_by_id(user_id)
    if user is None:
        raise AuthenticationException("user not found")
    return user
