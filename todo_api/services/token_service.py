"""Bearer token helpers (issue, decode, request authentication)."""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from todo_api.core.config import get_settings
from todo_api.db.models import User

ALGORITHM = "HS256"
CLAIM_USER_ID = "nameid"

_bearer = HTTPBearer(auto_error=False)


def issue_token(user: User) -> str:
    """Sign a token carrying the email (sub), a fresh token id (jti) and the user id."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    claims = {
        "sub": user.email,
        "jti": str(uuid.uuid4()),
        CLAIM_USER_ID: user.id,
        "iss": settings.token_issuer,
        "aud": settings.token_audience,
        "iat": now,
        "exp": now + timedelta(seconds=settings.token_ttl_seconds),
    }
    return jwt.encode(claims, settings.token_key, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """Verify signature, issuer, audience and expiry; raises jwt.InvalidTokenError."""
    settings = get_settings()
    return jwt.decode(
        token,
        settings.token_key,
        algorithms=[ALGORITHM],
        audience=settings.token_audience,
        issuer=settings.token_issuer,
        options={"require": ["exp", "sub", "jti", CLAIM_USER_ID]},
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def current_claims(credentials: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> dict:
    if credentials is None or (credentials.scheme or "").lower() != "bearer":
        raise _unauthorized("Not authenticated")
    try:
        return decode_token(credentials.credentials)
    except jwt.InvalidTokenError as exc:
        raise _unauthorized("Invalid token") from exc


def current_user_id(claims: dict = Depends(current_claims)) -> str:
    """Return the authenticated user id, looked up by claim name."""
    user_id = claims.get(CLAIM_USER_ID)
    if not user_id:
        raise _unauthorized("Invalid token")
    return str(user_id)
