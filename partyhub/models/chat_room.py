from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from partyhub.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from partyhub.models.party import Party


class ChatRoom(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Placeholder row owned by the chat service; created with its party."""

    __tablename__ = "chat_rooms"

    party_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("parties.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    party: Mapped[Party] = relationship(back_populates="chat_room")
