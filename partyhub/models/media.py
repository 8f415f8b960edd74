from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from partyhub.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, utcnow

if TYPE_CHECKING:
    from partyhub.models.user import User


class MediaType(str, enum.Enum):
    PHOTO = "PHOTO"
    VIDEO = "VIDEO"
    AUDIO = "AUDIO"


class MediaMood(str, enum.Enum):
    HYPE = "HYPE"
    CHILL = "CHILL"
    WILD = "WILD"
    ROMANTIC = "ROMANTIC"
    CRAZY = "CRAZY"
    ELEGANT = "ELEGANT"


class Media(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "media"
    __table_args__ = (
        CheckConstraint("likes_count >= 0", name="ck_media_likes_count_non_negative"),
        CheckConstraint("views_count >= 0", name="ck_media_views_count_non_negative"),
        Index("ix_media_party_created", "party_id", "created_at"),
    )

    # Rows go with their party through the FK cascade
    party_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("parties.id", ondelete="CASCADE"), nullable=False
    )
    uploader_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    media_type: Mapped[MediaType] = mapped_column(
        SAEnum(MediaType, name="media_type"), nullable=False
    )
    mood: Mapped[MediaMood | None] = mapped_column(
        SAEnum(MediaMood, name="media_mood"), nullable=True
    )

    # Object key in the blob store; url is what the store resolves it to
    storage_key: Mapped[str] = mapped_column(String(500), unique=True, nullable=False)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    thumbnail_key: Mapped[str | None] = mapped_column(String(500), nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    caption: Mapped[str | None] = mapped_column(String(500), nullable=True)
    width: Mapped[int | None] = mapped_column(Integer, nullable=True)
    height: Mapped[int | None] = mapped_column(Integer, nullable=True)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)

    # Denormalized; only changed together with a MediaLike row
    likes_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    views_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    uploader: Mapped[User] = relationship(lazy="joined")


class MediaLike(Base):
    __tablename__ = "media_likes"

    media_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("media.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class MediaFavorite(Base):
    __tablename__ = "media_favorites"

    media_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("media.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    media: Mapped[Media] = relationship(lazy="joined")
