from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from partyhub.models.base import Base, UUIDPrimaryKeyMixin, utcnow

if TYPE_CHECKING:
    from partyhub.models.party import Party
    from partyhub.models.user import User


class AttendeeRole(str, enum.Enum):
    HOST = "host"
    GUEST = "guest"


class PartyAttendee(Base, UUIDPrimaryKeyMixin):
    __tablename__ = "party_attendees"
    __table_args__ = (
        UniqueConstraint("party_id", "user_id", name="uq_party_attendee_party_user"),
        # Exactly one host row per party
        Index(
            "uq_party_attendee_single_host",
            "party_id",
            unique=True,
            postgresql_where=text("role = 'host'"),
            sqlite_where=text("role = 'host'"),
        ),
        Index("ix_party_attendees_party_joined", "party_id", "joined_at"),
    )

    party_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("parties.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    # host/guest, stored as the plain string value
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=AttendeeRole.GUEST.value)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    party: Mapped[Party] = relationship(back_populates="attendees")
    user: Mapped[User] = relationship(lazy="joined")
