from __future__ import annotations

import uuid
from collections.abc import Iterable

import structlog
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from partyhub.core.config import settings
from partyhub.models import Notification
from partyhub.models.notification import NotificationKind
from partyhub.services.party_queries import check_pagination
from partyhub.worker.celery_app import celery_app

logger = structlog.get_logger(__name__)


def dispatch(
    kind: NotificationKind,
    party_id: uuid.UUID,
    party_title: str,
    actor_id: uuid.UUID | None,
    recipient_ids: Iterable[uuid.UUID],
) -> bool:
    """Publish a notification task after the core transaction has committed.

    Never raises: a failed publish is logged and the caller carries on.
    Returns whether a task was handed to the broker.
    """
    recipients = [str(rid) for rid in recipient_ids if rid != actor_id]
    if not settings.notifications_enabled or not recipients:
        return False

    try:
        celery_app.send_task(
            "notify_party_event",
            kwargs={
                "kind": kind.value,
                "party_id": str(party_id),
                "party_title": party_title,
                "actor_id": str(actor_id) if actor_id else None,
                "recipient_ids": recipients,
            },
        )
    except Exception:
        logger.warning(
            "notification_dispatch_failed",
            kind=kind.value,
            party_id=str(party_id),
            exc_info=True,
        )
        return False
    return True


def list_notifications(
    db: Session,
    user_id: uuid.UUID,
    page: int,
    limit: int,
) -> tuple[list[Notification], int]:
    """A user's recorded notifications, newest first."""
    check_pagination(page, limit)
    total = db.scalar(
        select(func.count()).select_from(Notification).where(Notification.user_id == user_id)
    )
    rows = db.scalars(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(rows), int(total or 0)
