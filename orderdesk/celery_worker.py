"""
Celery Worker Configuration
Sets up Celery with Redis as message broker and result backend.

Only needed when REPORT_DISPATCH=celery; reports are then written by the
worker instead of the API process:

    celery -A orderdesk.celery_worker worker --loglevel=info
"""

from celery import Celery

from orderdesk.core.config import get_settings

REDIS_URL = get_settings().redis_url

celery_app = Celery(
    "orderdesk_worker",
    broker=REDIS_URL,
    backend=REDIS_URL,
    include=["orderdesk.tasks"],
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=get_settings().timezone,
    enable_utc=True,

    # Worker settings
    worker_prefetch_multiplier=1,  # One report at a time
    worker_concurrency=2,

    # Result settings
    result_expires=24 * 3600,

    # Task execution settings
    task_acks_late=True,  # Acknowledge task after completion
    task_reject_on_worker_lost=True,  # Requeue task if worker dies

    broker_connection_retry_on_startup=True,
)


if __name__ == "__main__":
    celery_app.start()
