from celery import Celery

from forum.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "forum",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["forum.workers.tasks"],
)
celery_app.conf.update(
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
    # Ack after the task body finishes so a crashed worker redelivers the email.
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_ignore_result=True,
)
