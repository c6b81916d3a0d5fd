from __future__ import annotations

from datetime import datetime, timezone

import jwt
import pytest

from todo_api.core.config import get_settings
from todo_api.db.models import User
from todo_api.services.token_service import CLAIM_USER_ID, current_user_id, decode_token, issue_token


def _user() -> User:
    return User(id="user-123", email="token@example.com")


def test_token_carries_named_claims_and_one_day_expiry(db_env):
    token = issue_token(_user())
    claims = decode_token(token)

    assert claims["sub"] == "token@example.com"
    assert claims[CLAIM_USER_ID] == "user-123"
    assert claims["jti"]
    assert claims["iss"] == get_settings().token_issuer
    lifetime = claims["exp"] - int(datetime.now(timezone.utc).timestamp())
    assert 86400 - 60 <= lifetime <= 86400


def test_each_token_gets_a_fresh_id(db_env):
    first = decode_token(issue_token(_user()))
    second = decode_token(issue_token(_user()))
    assert first["jti"] != second["jti"]


def test_token_signed_with_other_key_is_rejected(db_env):
    settings = get_settings()
    forged = jwt.encode(
        {"sub": "x", "jti": "1", CLAIM_USER_ID: "user-123", "iss": settings.token_issuer,
         "aud": settings.token_audience, "exp": 4102444800},
        "some-other-key-0123456789abcdef0123456789",
        algorithm="HS256",
    )
    with pytest.raises(jwt.InvalidSignatureError):
        decode_token(forged)


def test_expired_token_is_rejected(db_env):
    settings = get_settings()
    stale = jwt.encode(
        {"sub": "x", "jti": "1", CLAIM_USER_ID: "user-123", "iss": settings.token_issuer,
         "aud": settings.token_audience, "exp": 1000},
        settings.token_key,
        algorithm="HS256",
    )
    with pytest.raises(jwt.ExpiredSignatureError):
        decode_token(stale)


def test_user_id_is_read_by_claim_name_not_position():
    claims = {CLAIM_USER_ID: "user-123", "jti": "abc", "sub": "token@example.com", "extra": "x"}
    assert current_user_id(claims) == "user-123"
