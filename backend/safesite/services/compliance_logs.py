"""Compliance log admission and retrieval, always scoped through the parent protocol."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from .. import models
from ..errors import ValidationError
from .protocols import get_owned_protocol

# purpose: admit and list compliance logs behind a fresh ownership check
# status: active
# depends_on: services/protocols.py
# related_docs: DESIGN.md


logger = logging.getLogger(__name__)

NOTE_MAX_LENGTH = 500
FUTURE_COMPLETION = "Cannot log future compliance checks"

_UTC_NOW = datetime.now


def _utcnow() -> datetime:
    return _UTC_NOW(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def create_log(
    db: Session,
    protocol_id: UUID,
    owner_id: UUID,
    *,
    completion_date: datetime | None = None,
    note: str | None = None,
) -> models.ComplianceLog:
    """Record that an owned protocol's inspection was completed.

    Ownership is re-checked on every call. ``completion_date`` defaults to
    now and may not lie in the future.
    """

    get_owned_protocol(db, owner_id, protocol_id)

    now = _utcnow()
    completed_at = _as_utc(completion_date) if completion_date is not None else now
    if completed_at > now:
        raise ValidationError(FUTURE_COMPLETION)
    if note is not None and len(note) > NOTE_MAX_LENGTH:
        raise ValidationError(f"note must be at most {NOTE_MAX_LENGTH} characters")

    log = models.ComplianceLog(
        protocol_id=protocol_id,
        completion_date=completed_at,
        note=note,
        created_at=now,
    )
    db.add(log)
    db.flush()
    db.refresh(log)
    logger.info("Recorded compliance log %s for protocol %s", log.id, protocol_id)
    return log


def list_logs(db: Session, protocol_id: UUID, owner_id: UUID) -> Sequence[models.ComplianceLog]:
    """Return every log of an owned protocol, most recent completion first."""

    get_owned_protocol(db, owner_id, protocol_id)
    return (
        db.query(models.ComplianceLog)
        .filter(models.ComplianceLog.protocol_id == protocol_id)
        .order_by(models.ComplianceLog.completion_date.desc())
        .all()
    )
