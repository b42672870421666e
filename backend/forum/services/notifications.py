"""Post-commit notifications.

Routes call a ``Notifier`` only after the owning transaction has committed.
``CeleryNotifier`` hands the email to a Celery task, which retries delivery on
its own; the request never waits on SMTP.
"""
import logging
from typing import Protocol

from forum.core.config import get_settings
from forum.core.exceptions import NotificationError
from forum.workers.tasks import send_new_answer_email, send_password_reset_email

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send_password_reset(self, email: str, token: str) -> None: ...

    def send_new_answer(self, email: str, question_title: str, questionid: str, answer_text: str) -> None: ...


def reset_url(token: str) -> str:
    return f"{get_settings().FRONTEND_URL}/reset-password?token={token}"


def question_url(questionid: str) -> str:
    return f"{get_settings().FRONTEND_URL}/question/{questionid}"


class CeleryNotifier:
    def send_password_reset(self, email: str, token: str) -> None:
        try:
            send_password_reset_email.delay(email, reset_url(token))
        except Exception as exc:
            logger.exception("Could not enqueue password reset email")
            raise NotificationError("password reset email could not be queued") from exc

    def send_new_answer(self, email: str, question_title: str, questionid: str, answer_text: str) -> None:
        try:
            send_new_answer_email.delay(email, question_title, answer_text, question_url(questionid))
        except Exception as exc:
            logger.exception("Could not enqueue new answer email")
            raise NotificationError("new answer email could not be queued") from exc
