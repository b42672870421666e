import logging
import smtplib

from forum.core.config import get_settings
from forum.services.email import new_answer_message, password_reset_message, send_email
from forum.workers.celery_app import celery_app

logger = logging.getLogger(__name__)
settings = get_settings()

# Transient delivery failures are retried with exponential backoff.
RETRYABLE = (smtplib.SMTPException, OSError)


@celery_app.task(
    name="forum.send_password_reset_email",
    autoretry_for=RETRYABLE,
    retry_backoff=True,
    retry_backoff_max=600,
    max_retries=settings.NOTIFY_MAX_RETRIES,
)
def send_password_reset_email(to_email: str, reset_url: str) -> dict:
    subject, body = password_reset_message(reset_url, settings.PASSWORD_RESET_TOKEN_TTL_MINUTES)
    send_email(to_email, subject, body)
    logger.info("Password reset email delivered")
    return {"status": "sent"}


@celery_app.task(
    name="forum.send_new_answer_email",
    autoretry_for=RETRYABLE,
    retry_backoff=True,
    retry_backoff_max=600,
    max_retries=settings.NOTIFY_MAX_RETRIES,
)
def send_new_answer_email(to_email: str, question_title: str, answer_text: str, question_url: str) -> dict:
    subject, body, html = new_answer_message(question_title, answer_text, question_url)
    send_email(to_email, subject, body, html=html)
    logger.info("New answer email delivered")
    return {"status": "sent"}
