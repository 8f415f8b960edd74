from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from partyhub.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from partyhub.models.chat_room import ChatRoom
    from partyhub.models.party_attendee import PartyAttendee
    from partyhub.models.tag import PartyTag
    from partyhub.models.user import User
    from partyhub.models.venue import Venue


class PartyStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PLANNED = "PLANNED"
    LIVE = "LIVE"
    ENDED = "ENDED"
    CANCELLED = "CANCELLED"


# Explicit, caller-driven transitions; re-asserting the current status is handled by the service.
STATUS_TRANSITIONS: dict[PartyStatus, frozenset[PartyStatus]] = {
    PartyStatus.DRAFT: frozenset({PartyStatus.PLANNED, PartyStatus.CANCELLED}),
    PartyStatus.PLANNED: frozenset({PartyStatus.LIVE, PartyStatus.CANCELLED}),
    PartyStatus.LIVE: frozenset({PartyStatus.ENDED, PartyStatus.CANCELLED}),
    PartyStatus.ENDED: frozenset(),
    PartyStatus.CANCELLED: frozenset(),
}

CREATABLE_STATUSES = frozenset({PartyStatus.DRAFT, PartyStatus.PLANNED})
CLOSED_STATUSES = frozenset({PartyStatus.ENDED, PartyStatus.CANCELLED})


class Party(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "parties"
    __table_args__ = (
        CheckConstraint("attendees_count >= 0", name="ck_parties_attendees_count_non_negative"),
        CheckConstraint(
            "max_attendees IS NULL OR max_attendees > 0", name="ck_parties_max_attendees_positive"
        ),
        Index("ix_parties_starts_at", "starts_at"),
        Index("ix_parties_host_id", "host_id"),
    )

    host_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    cover_image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[PartyStatus] = mapped_column(
        SAEnum(PartyStatus, name="party_status"), nullable=False, default=PartyStatus.PLANNED
    )
    is_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Present iff is_private
    access_code: Mapped[str | None] = mapped_column(String(16), unique=True, nullable=True)
    max_attendees: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Denormalized headcount; only ever changed together with an attendee row
    attendees_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    host: Mapped[User] = relationship(lazy="joined")
    venue: Mapped[Venue | None] = relationship(
        back_populates="party", uselist=False, lazy="joined", cascade="all, delete-orphan"
    )
    attendees: Mapped[list[PartyAttendee]] = relationship(
        back_populates="party", cascade="all, delete-orphan"
    )
    tag_links: Mapped[list[PartyTag]] = relationship(
        back_populates="party",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="PartyTag.created_at",
    )
    chat_room: Mapped[ChatRoom | None] = relationship(
        back_populates="party", uselist=False, cascade="all, delete-orphan"
    )

    @property
    def tag_names(self) -> list[str]:
        return [link.tag.name for link in self.tag_links]
