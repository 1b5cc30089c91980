import re
from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .models import Frequency

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
NOTE_MAX_LENGTH = 500
# date and time are both required; offset is optional (naive means UTC)
ISO_DATETIME_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?$"
)


class CamelModel(BaseModel):
    """Base for wire models: camelCase JSON, snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _reject_nulls(values, fields):
    if isinstance(values, dict):
        for name in fields:
            for key in (name, to_camel(name)):
                if key in values and values[key] is None:
                    raise ValueError(f"{to_camel(name)} may not be null")
    return values


# --- users & auth ---


class RegisterRequest(CamelModel):
    email: EmailStr
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=8, max_length=72)
    first_name: Optional[str] = Field(default=None, max_length=50)
    last_name: Optional[str] = Field(default=None, max_length=50)


class LoginRequest(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserOut(CamelModel):
    id: UUID
    email: EmailStr
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    created_at: datetime


class UserUpdate(CamelModel):
    first_name: Optional[str] = Field(default=None, max_length=50)
    last_name: Optional[str] = Field(default=None, max_length=50)


class AuthResponse(CamelModel):
    message: str
    user: UserOut
    token: str


class MessageOut(CamelModel):
    message: str


# --- hazard zones ---


class HazardZoneCreate(CamelModel):
    name: str = Field(min_length=3, max_length=50)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)


class HazardZoneUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=3, max_length=50)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)

    @model_validator(mode="before")
    @classmethod
    def _columns_not_null(cls, values):
        return _reject_nulls(values, ("name", "color"))


class HazardZoneOut(CamelModel):
    id: UUID
    name: str
    color: str
    created_at: datetime
    updated_at: datetime


# --- protocols ---


class ProtocolCreate(CamelModel):
    name: str = Field(min_length=3, max_length=200)
    description: Optional[str] = None
    frequency: Frequency
    target_count: int = Field(default=1, ge=1, strict=True)
    zone_ids: Optional[List[UUID]] = None


class ProtocolUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=3, max_length=200)
    description: Optional[str] = None
    frequency: Optional[Frequency] = None
    target_count: Optional[int] = Field(default=None, ge=1, strict=True)
    is_active: Optional[bool] = None
    # absent leaves links untouched; [] clears them
    zone_ids: Optional[List[UUID]] = None

    @model_validator(mode="before")
    @classmethod
    def _required_columns_not_null(cls, values):
        return _reject_nulls(values, ("name", "frequency", "target_count", "is_active"))


class ProtocolSummaryOut(CamelModel):
    id: UUID
    user_id: UUID
    name: str
    description: Optional[str] = None
    frequency: Frequency
    target_count: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ProtocolOut(ProtocolSummaryOut):
    zones: List[HazardZoneOut] = []


class HazardZoneDetailOut(HazardZoneOut):
    protocols: List[ProtocolSummaryOut] = []


# --- compliance logs ---


class ComplianceLogCreate(CamelModel):
    completion_date: Optional[datetime] = None
    note: Optional[str] = Field(default=None, max_length=NOTE_MAX_LENGTH)

    @field_validator("completion_date", mode="before")
    @classmethod
    def _iso_datetime_only(cls, value):
        if value is None:
            return value
        if not isinstance(value, str) or not ISO_DATETIME_RE.match(value):
            raise ValueError("completionDate must be an ISO-8601 date-time string")
        return value


class ComplianceLogOut(CamelModel):
    id: UUID
    protocol_id: UUID
    completion_date: datetime
    note: Optional[str] = None
    created_at: datetime


class ProtocolDetailOut(ProtocolOut):
    compliance_logs: List[ComplianceLogOut] = []
