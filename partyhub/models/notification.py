from __future__ import annotations

import enum
import uuid
from typing import Any

from sqlalchemy import JSON, Boolean, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from partyhub.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class NotificationKind(str, enum.Enum):
    PARTY_JOINED = "PARTY_JOINED"
    PARTY_LEFT = "PARTY_LEFT"
    PARTY_STARTED = "PARTY_STARTED"
    PARTY_ENDED = "PARTY_ENDED"
    PARTY_CANCELLED = "PARTY_CANCELLED"
    PARTY_DELETED = "PARTY_DELETED"


class Notification(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "notifications"
    __table_args__ = (Index("ix_notifications_user_created", "user_id", "created_at"),)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    body: Mapped[str] = mapped_column(String(500), nullable=False)

    # No FK to parties: the party may already be gone when this is written
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
