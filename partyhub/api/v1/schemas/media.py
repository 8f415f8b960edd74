from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, Field

from partyhub.api.v1.schemas.parties import SchemaBase, UserSummaryOut, UTCOutMixin
from partyhub.models.media import MediaMood, MediaType


class UploadUrlIn(SchemaBase):
    party_id: UUID = Field(validation_alias=AliasChoices("party_id", "partyId"))
    media_type: MediaType = Field(validation_alias=AliasChoices("media_type", "mediaType"))
    content_type: str = Field(
        min_length=1, max_length=100, validation_alias=AliasChoices("content_type", "contentType")
    )
    file_name: str | None = Field(
        default=None, max_length=255, validation_alias=AliasChoices("file_name", "fileName")
    )


class ConfirmUploadIn(SchemaBase):
    storage_key: str = Field(
        min_length=1,
        max_length=500,
        validation_alias=AliasChoices("storage_key", "storageKey", "filePath"),
    )
    party_id: UUID = Field(validation_alias=AliasChoices("party_id", "partyId"))
    media_type: MediaType = Field(validation_alias=AliasChoices("media_type", "mediaType"))
    mood: MediaMood | None = None
    caption: str | None = Field(default=None, max_length=500)
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    duration: int | None = Field(default=None, gt=0)


class UploadTargetOut(SchemaBase):
    upload_url: str
    download_url: str
    storage_key: str
    expires_at: datetime


class MediaOut(UTCOutMixin, SchemaBase):
    id: UUID
    party_id: UUID
    media_type: MediaType
    url: str
    thumbnail_url: str | None = None
    mood: MediaMood | None = None
    caption: str | None = None
    duration: int | None = None
    width: int | None = None
    height: int | None = None
    file_size: int | None = None
    mime_type: str
    likes_count: int
    views_count: int
    created_at: datetime
    uploader: UserSummaryOut
