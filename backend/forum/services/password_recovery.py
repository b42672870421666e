"""Out-of-band password reset.

A reset token is 256 bits of randomness, valid for one hour and usable once.
Only its HMAC digest is stored on the user row; issuing a new token replaces
the previous one.
"""
import logging
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from forum.core.config import get_settings
from forum.core.database import transaction
from forum.core.exceptions import InvalidToken
from forum.core.security import (
    constant_time_equals,
    generate_reset_token,
    get_password_hash,
    reset_token_digest,
    utcnow,
)
from forum.models.user import User
from forum.services.accounts import validate_password

logger = logging.getLogger(__name__)


def request_password_reset(db: Session, email: str) -> tuple[User, str] | None:
    """Store a fresh reset token for ``email``.

    Returns ``None`` for unknown addresses (nothing is generated or stored), so
    the caller can answer both cases identically. The token is committed here,
    before any email is queued.
    """
    settings = get_settings()
    with transaction(db):
        user = db.scalars(select(User).where(User.email == email).with_for_update()).first()
        if user is None:
            return None

        token = generate_reset_token()
        user.reset_token_hash = reset_token_digest(token)
        user.reset_token_expires_at = utcnow() + timedelta(minutes=settings.PASSWORD_RESET_TOKEN_TTL_MINUTES)

    logger.info("Issued password reset token for user id=%s", user.id)
    return user, token


def reset_password(db: Session, token: str, new_password: str) -> User:
    digest = reset_token_digest(token)

    with transaction(db):
        user = db.scalars(
            select(User)
            .where(User.reset_token_hash == digest, User.reset_token_expires_at > utcnow())
            .with_for_update()
        ).first()
        # Unknown, already used and expired tokens share one error.
        if user is None or not constant_time_equals(user.reset_token_hash, digest):
            raise InvalidToken()

        validate_password(new_password)
        user.hashed_password = get_password_hash(new_password)
        user.reset_token_hash = None
        user.reset_token_expires_at = None

    logger.info("Password reset completed for user id=%s", user.id)
    return user
