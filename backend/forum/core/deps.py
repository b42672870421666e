import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from forum.core.database import get_db
from forum.core.exceptions import Unauthenticated
from forum.core.security import verify_access_token
from forum.models.user import User
from forum.services.notifications import CeleryNotifier, Notifier

logger = logging.getLogger(__name__)

# auto_error=False so a missing or non-Bearer header maps to our own 401.
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> User:
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()

    user_id = verify_access_token(credentials.credentials)

    # Re-read on every request: a deleted account invalidates its live tokens.
    user = db.get(User, user_id)
    if user is None:
        logger.info("Rejected token for missing user id=%s", user_id)
        raise Unauthenticated("User not found")

    request.state.user_id = user.id
    return user


def get_notifier() -> Notifier:
    return CeleryNotifier()
