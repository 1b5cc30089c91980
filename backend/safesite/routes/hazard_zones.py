"""Hazard zone CRUD routes; zones are shared across all authenticated users."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import IdentityContext, get_identity
from ..database import get_db
from ..services import hazard_zones as zone_service

router = APIRouter(prefix="/api/hazard-zones", tags=["hazard-zones"])


def _serialize_zone(zone: models.HazardZone) -> schemas.HazardZoneOut:
    return schemas.HazardZoneOut(
        id=zone.id,
        name=zone.name,
        color=zone.color,
        created_at=zone.created_at,
        updated_at=zone.updated_at,
    )


@router.get("", response_model=list[schemas.HazardZoneOut])
async def list_zones(
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(get_identity),
) -> list[schemas.HazardZoneOut]:
    return [_serialize_zone(zone) for zone in zone_service.list_zones(db)]


@router.post("", response_model=schemas.HazardZoneOut, status_code=status.HTTP_201_CREATED)
async def create_zone(
    payload: schemas.HazardZoneCreate,
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(get_identity),
) -> schemas.HazardZoneOut:
    zone = zone_service.create_zone(db, name=payload.name, color=payload.color)
    db.commit()
    db.refresh(zone)
    return _serialize_zone(zone)


@router.get("/{zone_id}", response_model=schemas.HazardZoneDetailOut)
async def get_zone(
    zone_id: UUID,
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(get_identity),
) -> schemas.HazardZoneDetailOut:
    """Return the zone with the caller's own linked protocols only."""

    zone = zone_service.get_zone(db, zone_id)
    protocols = zone_service.list_zone_protocols(db, zone_id, owner_id=identity.user_id)
    return schemas.HazardZoneDetailOut(
        **_serialize_zone(zone).model_dump(),
        protocols=[schemas.ProtocolSummaryOut.model_validate(p) for p in protocols],
    )


@router.patch("/{zone_id}", response_model=schemas.HazardZoneOut)
async def update_zone(
    zone_id: UUID,
    payload: schemas.HazardZoneUpdate,
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(get_identity),
) -> schemas.HazardZoneOut:
    zone = zone_service.update_zone(db, zone_id, name=payload.name, color=payload.color)
    db.commit()
    db.refresh(zone)
    return _serialize_zone(zone)


@router.delete("/{zone_id}", response_model=schemas.MessageOut)
async def delete_zone(
    zone_id: UUID,
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(get_identity),
) -> schemas.MessageOut:
    zone_service.delete_zone(db, zone_id)
    db.commit()
    return schemas.MessageOut(message="Hazard zone deleted successfully")
