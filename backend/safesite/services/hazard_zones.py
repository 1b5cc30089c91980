"""Hazard zone persistence: shared, unowned risk categories."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models
from ..errors import ConflictError, NotFoundError, ValidationError

# purpose: persist shared hazard zones with store-enforced name uniqueness
# status: active
# related_docs: DESIGN.md


logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")
_NAME_MIN, _NAME_MAX = 3, 50

ZONE_NOT_FOUND = "Hazard zone not found"
ZONE_NAME_TAKEN = "Hazard zone with this name already exists"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _validate_color(color: str) -> str:
    if not _HEX_COLOR.match(color):
        raise ValidationError("Invalid color format. Use hex code (e.g., #dc2626)")
    return color


def _validate_name(name: str) -> str:
    if not (_NAME_MIN <= len(name) <= _NAME_MAX):
        raise ValidationError(
            f"Hazard zone name must be between {_NAME_MIN} and {_NAME_MAX} characters"
        )
    return name


def _flush_or_conflict(db: Session, name: str) -> None:
    # the unique index on hazard_zones.name is the source of truth; a
    # read-before-write check would race with concurrent creators
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Hazard zone name conflict for %r", name)
        raise ConflictError(ZONE_NAME_TAKEN) from exc


def create_zone(db: Session, *, name: str, color: str | None = None) -> models.HazardZone:
    """Insert a zone, defaulting the color to low-risk green."""

    zone = models.HazardZone(
        name=_validate_name(name),
        color=_validate_color(color) if color is not None else models.DEFAULT_ZONE_COLOR,
        created_at=_utcnow(),
        updated_at=_utcnow(),
    )
    db.add(zone)
    _flush_or_conflict(db, name)
    db.refresh(zone)
    logger.info("Created hazard zone %s (%s)", zone.id, zone.name)
    return zone


def list_zones(db: Session) -> Sequence[models.HazardZone]:
    """Return every zone, newest first."""

    return (
        db.query(models.HazardZone)
        .order_by(models.HazardZone.created_at.desc())
        .all()
    )


def get_zone(db: Session, zone_id: UUID) -> models.HazardZone:
    zone = db.get(models.HazardZone, zone_id)
    if zone is None:
        raise NotFoundError(ZONE_NOT_FOUND)
    return zone


def list_zone_protocols(
    db: Session,
    zone_id: UUID,
    *,
    owner_id: UUID | None = None,
) -> Sequence[models.Protocol]:
    """Return protocols currently linked to a zone, newest first.

    Zones are shared but protocols are not: pass ``owner_id`` to restrict the
    result to the caller's own protocols.
    """

    query = (
        db.query(models.Protocol)
        .join(models.ProtocolZone, models.ProtocolZone.protocol_id == models.Protocol.id)
        .filter(models.ProtocolZone.zone_id == zone_id)
    )
    if owner_id is not None:
        query = query.filter(models.Protocol.user_id == owner_id)
    return query.order_by(models.Protocol.created_at.desc()).all()


def get_zones_by_ids(db: Session, zone_ids: Sequence[UUID]) -> list[models.HazardZone]:
    if not zone_ids:
        return []
    return (
        db.query(models.HazardZone)
        .filter(models.HazardZone.id.in_(list(zone_ids)))
        .order_by(models.HazardZone.name)
        .all()
    )


def update_zone(
    db: Session,
    zone_id: UUID,
    *,
    name: str | None = None,
    color: str | None = None,
) -> models.HazardZone:
    """Apply a partial update; absent fields keep their stored values."""

    zone = db.get(models.HazardZone, zone_id)
    if zone is None:
        raise NotFoundError(ZONE_NOT_FOUND)
    if name is not None:
        zone.name = _validate_name(name)
    if color is not None:
        zone.color = _validate_color(color)
    zone.updated_at = _utcnow()
    _flush_or_conflict(db, name or zone.name)
    db.refresh(zone)
    return zone


def delete_zone(db: Session, zone_id: UUID) -> None:
    """Remove a zone; its protocol links go with it, the protocols stay."""

    zone = db.get(models.HazardZone, zone_id)
    if zone is None:
        raise NotFoundError(ZONE_NOT_FOUND)
    db.delete(zone)
    db.flush()
    logger.info("Deleted hazard zone %s", zone_id)
