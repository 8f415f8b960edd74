from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    field_validator,
    model_validator,
)

from partyhub.models.party import CREATABLE_STATUSES, PartyStatus


def _ensure_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return value
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        raise ValueError("datetime must be timezone-aware")
    return value.astimezone(timezone.utc)


class SchemaBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")


class TZAwareMixin(BaseModel):
    @field_validator("starts_at", "ends_at", mode="after", check_fields=False)
    @classmethod
    def _validate_tzaware(cls, value: datetime | None) -> datetime | None:
        return _ensure_utc(value)


class VenueIn(SchemaBase):
    name: str = Field(min_length=1, max_length=200)
    address: str | None = Field(default=None, max_length=500)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    place_id: str | None = Field(default=None, max_length=255)


class PartyCreate(TZAwareMixin, SchemaBase):
    title: str = Field(min_length=3, max_length=100)
    description: str | None = Field(default=None, max_length=2000)
    cover_image_url: HttpUrl | None = None
    starts_at: datetime
    ends_at: datetime | None = None
    is_private: bool = False
    max_attendees: int | None = Field(default=None, ge=1)
    venue: VenueIn | None = None
    tags: list[str] = Field(default_factory=list, max_length=10)
    status: PartyStatus = PartyStatus.PLANNED

    @field_validator("tags")
    @classmethod
    def _validate_tags(cls, value: list[str]) -> list[str]:
        for tag in value:
            if not tag.strip() or len(tag) > 50:
                raise ValueError("tags must be 1-50 characters")
        return value

    @field_validator("status")
    @classmethod
    def _validate_initial_status(cls, value: PartyStatus) -> PartyStatus:
        if value not in CREATABLE_STATUSES:
            raise ValueError("status must be DRAFT or PLANNED")
        return value

    @model_validator(mode="after")
    def _validate_time_bounds(self):
        if self.ends_at and self.ends_at <= self.starts_at:
            raise ValueError("ends_at must be after starts_at")
        return self


class PartyUpdate(TZAwareMixin, SchemaBase):
    title: str | None = Field(default=None, min_length=3, max_length=100)
    description: str | None = Field(default=None, max_length=2000)
    cover_image_url: HttpUrl | None = None
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    is_private: bool | None = None
    max_attendees: int | None = Field(default=None, ge=1)
    status: PartyStatus | None = None
    venue: VenueIn | None = None

    @model_validator(mode="after")
    def _validate_time_bounds(self):
        if self.starts_at and self.ends_at and self.ends_at <= self.starts_at:
            raise ValueError("ends_at must be after starts_at")
        return self


class JoinPartyIn(SchemaBase):
    access_code: str | None = Field(
        default=None, validation_alias=AliasChoices("access_code", "accessCode")
    )


class JoinByCodeIn(SchemaBase):
    access_code: str = Field(
        min_length=1, max_length=32, validation_alias=AliasChoices("access_code", "accessCode")
    )


class UTCOutMixin(BaseModel):
    @field_validator(
        "starts_at", "ends_at", "created_at", "joined_at", mode="after", check_fields=False
    )
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        # SQLite drops tzinfo on the way back; stored values are always UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class UserSummaryOut(SchemaBase):
    id: UUID
    username: str
    display_name: str | None = None
    avatar_url: str | None = None


class VenueOut(SchemaBase):
    name: str
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    place_id: str | None = None


class PartyOut(UTCOutMixin, SchemaBase):
    id: UUID
    host_id: UUID
    title: str
    description: str | None = None
    cover_image_url: str | None = None
    starts_at: datetime
    ends_at: datetime | None = None
    status: PartyStatus
    is_private: bool
    access_code: str | None = None
    max_attendees: int | None = None
    attendees_count: int
    created_at: datetime
    host: UserSummaryOut
    venue: VenueOut | None = None
    tags: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("tag_names", "tags")
    )


class AttendeeOut(UTCOutMixin, SchemaBase):
    id: UUID
    username: str
    display_name: str | None = None
    avatar_url: str | None = None
    role: str
    joined_at: datetime


class PageMeta(SchemaBase):
    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total: int = Field(ge=0)
    total_pages: int = Field(ge=0, serialization_alias="totalPages")


class NotificationOut(UTCOutMixin, SchemaBase):
    id: UUID
    kind: str
    title: str
    body: str
    data: dict
    read: bool
    created_at: datetime
