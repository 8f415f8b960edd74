from celery import Celery

from partyhub.core.config import settings

celery_app = Celery(
    "partyhub",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["partyhub.worker.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    task_ignore_result=True,
    timezone="UTC",
    enable_utc=True,
    # Publishing is fire-and-forget; do not stall a request on a dead broker
    broker_connection_timeout=2,
    task_publish_retry=False,
)
