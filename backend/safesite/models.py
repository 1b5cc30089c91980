import enum
import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy import (
    Column,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from .database import Base

DEFAULT_ZONE_COLOR = "#16a34a"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Frequency(str, enum.Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    SHIFT_START = "SHIFT_START"
    SHIFT_END = "SHIFT_END"


class User(Base):
    __tablename__ = "users"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False)
    username = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(50))
    last_name = Column(String(50))
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    protocols = relationship(
        "Protocol",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class HazardZone(Base):
    __tablename__ = "hazard_zones"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # uniqueness lives in the schema so concurrent inserts cannot both succeed
    name = Column(String(50), unique=True, nullable=False)
    color = Column(String(7), default=DEFAULT_ZONE_COLOR, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    protocol_links = relationship(
        "ProtocolZone",
        back_populates="zone",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Protocol(Base):
    __tablename__ = "protocols"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(200), nullable=False)
    description = Column(Text)
    frequency = Column(String(20), nullable=False)
    target_count = Column(Integer, default=1, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    owner = relationship("User", back_populates="protocols")
    zone_links = relationship(
        "ProtocolZone",
        back_populates="protocol",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    zones = relationship(
        "HazardZone",
        secondary="protocol_zones",
        viewonly=True,
        order_by="HazardZone.name",
    )
    compliance_logs = relationship(
        "ComplianceLog",
        back_populates="protocol",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ComplianceLog.completion_date.desc()",
    )


class ProtocolZone(Base):
    __tablename__ = "protocol_zones"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    protocol_id = Column(
        UUID(as_uuid=True),
        ForeignKey("protocols.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    zone_id = Column(
        UUID(as_uuid=True),
        ForeignKey("hazard_zones.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    protocol = relationship("Protocol", back_populates="zone_links")
    zone = relationship("HazardZone", back_populates="protocol_links")


class ComplianceLog(Base):
    __tablename__ = "compliance_logs"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    protocol_id = Column(
        UUID(as_uuid=True),
        ForeignKey("protocols.id", ondelete="CASCADE"),
        nullable=False,
    )
    completion_date = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    note = Column(Text)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    protocol = relationship("Protocol", back_populates="compliance_logs")

    __table_args__ = (
        sa.Index("ix_compliance_logs_protocol_completion", "protocol_id", "completion_date"),
    )
