"""Tests for bearer token helpers."""

import jwt
import pytest

from app.config import get_settings
from app.core.exceptions import AuthenticationException
from app.core.security import create_access_token, decode_access_token


def test_round_trip():
    assert decode_access_token(create_access_token("user-1")) == "user-1"


def test_expired_token():
    token = create_access_token("user-1", expires_minutes=-1)
    with pytest.raises(AuthenticationException) as exc:
        decode_access_token(token)
    assert exc.value.status_code == 401
    assert exc.value.message == "Please authenticate."


def test_wrong_secret():
    token = jwt.encode({"userId": "user-1"}, "another-secret-another-secret-0123", algorithm="HS256")
    with pytest.raises(AuthenticationException):
        decode_access_token(token)


def test_missing_user_claim():
    settings = get_settings()
    token = jwt.encode({"sub": "user-1"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(AuthenticationException):
        decode_access_token(token)
