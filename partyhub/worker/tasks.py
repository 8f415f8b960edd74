import uuid

from celery.utils.log import get_task_logger
from sqlalchemy.orm import Session

from partyhub.db import SessionLocal
from partyhub.models import Notification
from partyhub.models.notification import NotificationKind
from partyhub.worker.celery_app import celery_app

logger = get_task_logger(__name__)

_MESSAGES = {
    NotificationKind.PARTY_JOINED: ("New guest", "Someone joined {title}."),
    NotificationKind.PARTY_LEFT: ("Guest left", "Someone left {title}."),
    NotificationKind.PARTY_STARTED: ("Party started", "{title} is live now."),
    NotificationKind.PARTY_ENDED: ("Party ended", "{title} has ended."),
    NotificationKind.PARTY_CANCELLED: ("Party cancelled", "{title} was cancelled."),
    NotificationKind.PARTY_DELETED: ("Party removed", "{title} was removed by its host."),
}


def render_notification(kind: NotificationKind, party_title: str) -> tuple[str, str]:
    title, body = _MESSAGES[kind]
    return title, body.format(title=party_title)


@celery_app.task(name="notify_party_event")
def notify_party_event(
    kind: str,
    party_id: str,
    party_title: str,
    actor_id: str | None,
    recipient_ids: list[str],
) -> int:
    """Record one notification per recipient. Push delivery reads these rows."""
    notification_kind = NotificationKind(kind)
    title, body = render_notification(notification_kind, party_title)

    db: Session = SessionLocal()
    try:
        for recipient_id in recipient_ids:
            db.add(
                Notification(
                    user_id=uuid.UUID(recipient_id),
                    kind=notification_kind.value,
                    title=title,
                    body=body,
                    data={"party_id": party_id, "actor_id": actor_id},
                )
            )
        db.commit()
        logger.info(
            "notifications_recorded kind=%s party_id=%s count=%d",
            notification_kind.value,
            party_id,
            len(recipient_ids),
        )
        return len(recipient_ids)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
