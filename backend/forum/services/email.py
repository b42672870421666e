import smtplib
from email.message import EmailMessage
from html import escape

from forum.core.config import get_settings


class EmailNotConfigured(RuntimeError):
    pass


def send_email(to_email: str, subject: str, body: str, html: str | None = None) -> None:
    settings = get_settings()
    if not settings.SMTP_HOST:
        raise EmailNotConfigured("SMTP is not configured")

    msg = EmailMessage()
    msg["From"] = settings.SMTP_FROM_EMAIL
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body)
    if html:
        msg.add_alternative(html, subtype="html")

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=20) as server:
        if settings.SMTP_USE_TLS:
            server.starttls()
        if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.send_message(msg)


def password_reset_message(reset_url: str, ttl_minutes: int) -> tuple[str, str]:
    subject = "Reset your password"
    body = (
        "You requested a password reset.\n\n"
        f"Reset link (expires in {ttl_minutes} minutes):\n{reset_url}\n\n"
        "If you did not request this, you can ignore this email."
    )
    return subject, body


def new_answer_message(question_title: str, answer_text: str, question_url: str) -> tuple[str, str, str]:
    subject = "New Answer to Your Question"
    body = (
        f'Your question "{question_title}" has a new answer:\n\n'
        f"{answer_text}\n\n"
        f"View the discussion: {question_url}"
    )
    html = (
        f"<p>Your question titled <strong>{escape(question_title)}</strong> has a new answer:</p>"
        f"<p><em>{escape(answer_text)}</em></p>"
        f'<p><a href="{escape(question_url)}">View the discussion</a></p>'
    )
    return subject, body, html
