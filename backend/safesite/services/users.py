"""User registration, credential checks, and account removal."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models
from ..auth import get_password_hash, verify_password
from ..errors import AuthenticationError, ConflictError, NotFoundError

# purpose: registration, credential checks and cascading account removal
# status: active
# related_docs: DESIGN.md


logger = logging.getLogger(__name__)

USER_EXISTS = "User with this email or username already exists"
BAD_CREDENTIALS = "Authentication failed. Please verify your credentials."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def register_user(
    db: Session,
    *,
    email: str,
    username: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
) -> models.User:
    user = models.User(
        email=email.lower(),
        username=username,
        hashed_password=get_password_hash(password),
        first_name=first_name,
        last_name=last_name,
        created_at=_utcnow(),
        updated_at=_utcnow(),
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Registration rejected: duplicate email or username")
        raise ConflictError(USER_EXISTS) from exc
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


def authenticate(db: Session, *, username: str, password: str) -> models.User:
    user = db.query(models.User).filter(models.User.username == username).first()
    if user is None or not verify_password(password, user.hashed_password):
        raise AuthenticationError(BAD_CREDENTIALS)
    return user


def update_profile(
    db: Session,
    user: models.User,
    *,
    first_name: str | None = None,
    last_name: str | None = None,
) -> models.User:
    if first_name is not None:
        user.first_name = first_name
    if last_name is not None:
        user.last_name = last_name
    db.flush()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: UUID) -> None:
    """Remove a user and, by cascade, every protocol they own."""

    user = db.get(models.User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    db.delete(user)
    db.flush()
    logger.info("Deleted user %s and owned protocols", user_id)
