"""Credential hashing, access tokens, and the per-request identity context."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import bcrypt
import jwt
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from . import models
from .database import get_db

logger = logging.getLogger(__name__)

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))

# bcrypt only looks at the first 72 bytes
_BCRYPT_MAX_BYTES = 72


@dataclass(frozen=True)
class IdentityContext:
    """Authenticated principal threaded through every service call."""

    user_id: UUID


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), hashed_password.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def create_access_token(claims: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    payload = dict(claims)
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload["exp"] = expire
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify signature and expiry, returning the token claims.

    Raises jwt.InvalidTokenError (or its ExpiredSignatureError subclass).
    """
    return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])


def issue_token_for(user: models.User) -> str:
    return create_access_token(
        {"sub": str(user.id), "email": user.email, "username": user.username}
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_identity(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> IdentityContext:
    """Resolve the bearer token on the request into an IdentityContext."""
    if not authorization or not authorization.startswith("Bearer "):
        raise _unauthorized("Missing or invalid auth header")

    token = authorization[7:]
    try:
        payload = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid token")

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError:
        raise _unauthorized("Invalid token")

    exists = db.query(models.User.id).filter(models.User.id == user_id).first()
    if not exists:
        logger.warning("Rejected token for unknown user %s", user_id)
        raise _unauthorized("Invalid token")
    return IdentityContext(user_id=user_id)


def get_current_user(
    identity: IdentityContext = Depends(get_identity),
    db: Session = Depends(get_db),
) -> models.User:
    user = db.get(models.User, identity.user_id)
    if user is None:
        raise _unauthorized("Invalid token")
    return user
