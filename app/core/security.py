"""
Bearer token helpers.
HS256 JWTs carrying the account id in a ``userId`` claim.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from app.config import get_settings
from app.core.exceptions import AuthenticationException

settings = get_settings()


def create_access_token(user_id: str, expires_minutes: Optional[int] = None) -> str:
    """Sign a token for ``user_id``."""
    expires = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.JWT_EXPIRY_MINUTES
    )
    payload = {"userId": user_id, "exp": expires}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> str:
    """Return the ``userId`` claim, or raise AuthenticationException."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationException("token expired")
    except jwt.InvalidTokenError as e:
        raise AuthenticationException(f"invalid token: {e}")

    user_id = payload.get("userId")
    if not user_id:
        raise AuthenticationException("token has no userId claim")
    return user_id
