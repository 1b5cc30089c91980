"""Protocol and compliance log routes, scoped to the authenticated owner."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import IdentityContext, get_identity
from ..database import get_db
from ..services import compliance_logs as log_service
from ..services import protocols as protocol_service

router = APIRouter(prefix="/api/protocols", tags=["protocols"])


def _serialize_protocol(view: protocol_service.ProtocolView) -> schemas.ProtocolOut:
    return schemas.ProtocolOut(
        **schemas.ProtocolSummaryOut.model_validate(view.protocol).model_dump(),
        zones=[schemas.HazardZoneOut.model_validate(zone) for zone in view.zones],
    )


def _serialize_log(log: models.ComplianceLog) -> schemas.ComplianceLogOut:
    return schemas.ComplianceLogOut(
        id=log.id,
        protocol_id=log.protocol_id,
        completion_date=log.completion_date,
        note=log.note,
        created_at=log.created_at,
    )


@router.post("", response_model=schemas.ProtocolOut, status_code=status.HTTP_201_CREATED)
async def create_protocol(
    payload: schemas.ProtocolCreate,
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(get_identity),
) -> schemas.ProtocolOut:
    view = protocol_service.create_protocol(
        db,
        identity.user_id,
        name=payload.name,
        description=payload.description,
        frequency=payload.frequency,
        target_count=payload.target_count,
        zone_ids=payload.zone_ids,
    )
    result = _serialize_protocol(view)
    db.commit()
    return result


@router.get("", response_model=list[schemas.ProtocolOut])
async def list_protocols(
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(get_identity),
) -> list[schemas.ProtocolOut]:
    return [_serialize_protocol(view) for view in protocol_service.list_protocols(db, identity.user_id)]


@router.get("/{protocol_id}", response_model=schemas.ProtocolDetailOut)
async def get_protocol(
    protocol_id: UUID,
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(get_identity),
) -> schemas.ProtocolDetailOut:
    view = protocol_service.get_protocol(db, identity.user_id, protocol_id)
    return schemas.ProtocolDetailOut(
        **_serialize_protocol(view).model_dump(),
        compliance_logs=[_serialize_log(log) for log in view.recent_logs],
    )


@router.patch("/{protocol_id}", response_model=schemas.ProtocolOut)
async def update_protocol(
    protocol_id: UUID,
    payload: schemas.ProtocolUpdate,
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(get_identity),
) -> schemas.ProtocolOut:
    view = protocol_service.update_protocol(
        db,
        identity.user_id,
        protocol_id,
        changes=payload.model_dump(exclude_unset=True, exclude={"zone_ids"}),
        zone_ids=payload.zone_ids,
    )
    result = _serialize_protocol(view)
    db.commit()
    return result


@router.delete("/{protocol_id}", response_model=schemas.MessageOut)
async def delete_protocol(
    protocol_id: UUID,
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(get_identity),
) -> schemas.MessageOut:
    protocol_service.delete_protocol(db, identity.user_id, protocol_id)
    db.commit()
    return schemas.MessageOut(message="Protocol deleted successfully")


@router.post(
    "/{protocol_id}/compliance-logs",
    response_model=schemas.ComplianceLogOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_compliance_log(
    protocol_id: UUID,
    payload: schemas.ComplianceLogCreate,
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(get_identity),
) -> schemas.ComplianceLogOut:
    log = log_service.create_log(
        db,
        protocol_id,
        identity.user_id,
        completion_date=payload.completion_date,
        note=payload.note,
    )
    db.commit()
    db.refresh(log)
    return _serialize_log(log)


@router.get("/{protocol_id}/compliance-logs", response_model=list[schemas.ComplianceLogOut])
async def list_compliance_logs(
    protocol_id: UUID,
    db: Session = Depends(get_db),
    identity: IdentityContext = Depends(get_identity),
) -> list[schemas.ComplianceLogOut]:
    return [_serialize_log(log) for log in log_service.list_logs(db, protocol_id, identity.user_id)]
