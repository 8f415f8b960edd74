from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, Field, HttpUrl

from partyhub.api.v1.schemas.parties import SchemaBase, UTCOutMixin


class UserProfileOut(UTCOutMixin, SchemaBase):
    id: UUID
    username: str
    display_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    created_at: datetime


class UserUpdate(SchemaBase):
    username: str | None = None
    display_name: str | None = Field(
        default=None,
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("display_name", "displayName"),
    )
    bio: str | None = Field(default=None, max_length=500)
    avatar_url: HttpUrl | None = Field(
        default=None, validation_alias=AliasChoices("avatar_url", "avatarUrl")
    )


class UsernameCheckOut(SchemaBase):
    available: bool
    valid: bool
    error: str | None = None
    suggestion: str | None = None
