"""Owner-scoped protocol orchestration and hazard zone link synchronization."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Sequence
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from .. import models
from ..errors import NotFoundError, ValidationError
from . import hazard_zones

# purpose: owner-scoped protocol CRUD with full-replace hazard zone link sync
# status: active
# depends_on: services/hazard_zones.py
# related_docs: DESIGN.md


logger = logging.getLogger(__name__)

PROTOCOL_NOT_FOUND = "Protocol not found"
RECENT_LOG_LIMIT = 10

_MUTABLE_FIELDS = {"name", "description", "frequency", "target_count", "is_active"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ProtocolView:
    """A protocol together with the zones resolved for the response."""

    protocol: models.Protocol
    zones: list[models.HazardZone] = field(default_factory=list)
    recent_logs: list[models.ComplianceLog] = field(default_factory=list)


def _frequency(value: Any) -> str:
    try:
        return models.Frequency(value).value
    except ValueError as exc:
        allowed = ", ".join(f.value for f in models.Frequency)
        raise ValidationError(f"frequency must be one of: {allowed}") from exc


def _target_count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError("targetCount must be an integer of at least 1")
    return value


def _owned_query(db: Session, owner_id: UUID, protocol_id: UUID):
    return db.query(models.Protocol).filter(
        models.Protocol.id == protocol_id,
        models.Protocol.user_id == owner_id,
    )


def get_owned_protocol(db: Session, owner_id: UUID, protocol_id: UUID) -> models.Protocol:
    """Return the protocol if ``owner_id`` owns it.

    Missing and foreign protocols raise the same NotFoundError.
    """

    protocol = _owned_query(db, owner_id, protocol_id).one_or_none()
    if protocol is None:
        raise NotFoundError(PROTOCOL_NOT_FOUND)
    return protocol


# --- zone link synchronization ---


def _unique_ids(zone_ids: Iterable[UUID]) -> list[UUID]:
    seen: set[UUID] = set()
    ordered = []
    for zone_id in zone_ids:
        if zone_id not in seen:
            seen.add(zone_id)
            ordered.append(zone_id)
    return ordered


def link_zones(db: Session, protocol_id: UUID, zone_ids: Sequence[UUID]) -> list[models.HazardZone]:
    """Insert one link row per zone and return the resolved zones.

    Runs inside the caller's transaction. Unknown zone ids roll the whole
    transaction back so no partially linked protocol is ever committed.
    """

    wanted = _unique_ids(zone_ids)
    if not wanted:
        return []
    zones = hazard_zones.get_zones_by_ids(db, wanted)
    missing = set(wanted) - {zone.id for zone in zones}
    if missing:
        db.rollback()
        unknown = ", ".join(sorted(str(zone_id) for zone_id in missing))
        raise ValidationError(f"Unknown hazard zone id(s): {unknown}")
    db.add_all(
        models.ProtocolZone(protocol_id=protocol_id, zone_id=zone_id, created_at=_utcnow())
        for zone_id in wanted
    )
    db.flush()
    return zones


def replace_zone_links(
    db: Session, protocol_id: UUID, zone_ids: Sequence[UUID]
) -> list[models.HazardZone]:
    """Make the protocol's link set exactly ``zone_ids`` (full replace, no diff)."""

    db.query(models.ProtocolZone).filter(
        models.ProtocolZone.protocol_id == protocol_id
    ).delete(synchronize_session="fetch")
    db.flush()
    return link_zones(db, protocol_id, zone_ids)


def current_zones(db: Session, protocol_id: UUID) -> list[models.HazardZone]:
    return (
        db.query(models.HazardZone)
        .join(models.ProtocolZone, models.ProtocolZone.zone_id == models.HazardZone.id)
        .filter(models.ProtocolZone.protocol_id == protocol_id)
        .order_by(models.HazardZone.name)
        .all()
    )


# --- protocol operations ---


def create_protocol(
    db: Session,
    owner_id: UUID,
    *,
    name: str,
    frequency: models.Frequency | str,
    target_count: int = 1,
    description: str | None = None,
    zone_ids: Sequence[UUID] | None = None,
) -> ProtocolView:
    """Insert a protocol owned by ``owner_id`` and link it to ``zone_ids``.

    The protocol row and its links are flushed in one transaction; the
    caller commits.
    """

    protocol = models.Protocol(
        user_id=owner_id,
        name=name,
        description=description,
        frequency=_frequency(frequency),
        target_count=_target_count(target_count),
        is_active=True,
        created_at=_utcnow(),
        updated_at=_utcnow(),
    )
    db.add(protocol)
    db.flush()
    zones = link_zones(db, protocol.id, zone_ids or [])
    db.refresh(protocol)
    logger.info("Created protocol %s for user %s with %d zone(s)", protocol.id, owner_id, len(zones))
    return ProtocolView(protocol=protocol, zones=zones)


def update_protocol(
    db: Session,
    owner_id: UUID,
    protocol_id: UUID,
    *,
    changes: dict[str, Any] | None = None,
    zone_ids: Sequence[UUID] | None = None,
) -> ProtocolView:
    """Apply field changes and, when given, replace the zone link set.

    ``zone_ids=None`` leaves links untouched; ``zone_ids=[]`` clears them.
    """

    values = {key: value for key, value in (changes or {}).items() if key in _MUTABLE_FIELDS}
    if "frequency" in values:
        values["frequency"] = _frequency(values["frequency"])
    if "target_count" in values:
        values["target_count"] = _target_count(values["target_count"])
    values["updated_at"] = _utcnow()

    # the ownership filter is part of the UPDATE itself
    affected = _owned_query(db, owner_id, protocol_id).update(
        values, synchronize_session="fetch"
    )
    if not affected:
        raise NotFoundError(PROTOCOL_NOT_FOUND)

    if zone_ids is not None:
        zones = replace_zone_links(db, protocol_id, zone_ids)
    else:
        zones = current_zones(db, protocol_id)

    protocol = db.get(models.Protocol, protocol_id)
    db.refresh(protocol)
    logger.info("Updated protocol %s (zones replaced: %s)", protocol_id, zone_ids is not None)
    return ProtocolView(protocol=protocol, zones=zones)


def delete_protocol(db: Session, owner_id: UUID, protocol_id: UUID) -> None:
    """Delete an owned protocol; links and compliance logs cascade with it."""

    protocol = get_owned_protocol(db, owner_id, protocol_id)
    db.delete(protocol)
    db.flush()
    logger.info("Deleted protocol %s for user %s", protocol_id, owner_id)


def get_protocol(db: Session, owner_id: UUID, protocol_id: UUID) -> ProtocolView:
    """Return an owned protocol with its zones and most recent compliance logs."""

    protocol = (
        _owned_query(db, owner_id, protocol_id)
        .options(selectinload(models.Protocol.zones))
        .populate_existing()
        .one_or_none()
    )
    if protocol is None:
        raise NotFoundError(PROTOCOL_NOT_FOUND)
    recent_logs = (
        db.query(models.ComplianceLog)
        .filter(models.ComplianceLog.protocol_id == protocol.id)
        .order_by(models.ComplianceLog.completion_date.desc())
        .limit(RECENT_LOG_LIMIT)
        .all()
    )
    return ProtocolView(protocol=protocol, zones=list(protocol.zones), recent_logs=recent_logs)


def list_protocols(db: Session, owner_id: UUID) -> list[ProtocolView]:
    """Return all protocols owned by ``owner_id``, newest first."""

    protocols = (
        db.query(models.Protocol)
        .options(selectinload(models.Protocol.zones))
        .filter(models.Protocol.user_id == owner_id)
        .populate_existing()
        .order_by(models.Protocol.created_at.desc())
        .all()
    )
    return [ProtocolView(protocol=protocol, zones=list(protocol.zones)) for protocol in protocols]
