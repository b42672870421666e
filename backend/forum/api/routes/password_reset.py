import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from forum.core.config import get_settings
from forum.core.database import get_db
from forum.core.deps import get_notifier
from forum.core.exceptions import BadRequest, Internal, NotificationError
from forum.core.rate_limit import limiter
from forum.schemas.password_reset import ForgotPasswordRequest, MessageResponse, ResetPasswordRequest
from forum.services.notifications import Notifier
from forum.services.password_recovery import request_password_reset, reset_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["password"])
settings = get_settings()

GENERIC_FORGOT_MESSAGE = "If the email exists, a password reset link has been sent."


@router.post("/forgot-password", response_model=MessageResponse)
@limiter.limit(settings.FORGOT_PASSWORD_RATE_LIMIT)
def forgot_password(
    request: Request,
    payload: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    if not payload.email.strip():
        raise BadRequest("Email is required.")

    # Same response whether or not the account exists.
    issued = request_password_reset(db, payload.email)
    if issued is not None:
        user, token = issued
        try:
            notifier.send_password_reset(user.email, token)
        except NotificationError as exc:
            # Token stays committed; only the hand-off to the mail queue failed.
            raise Internal("Internal Server Error. Please try again later.") from exc

    return MessageResponse(message=GENERIC_FORGOT_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password_route(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    if not payload.token or not payload.new_password:
        raise BadRequest("Token and new password are required.")
    reset_password(db, payload.token, payload.new_password)
    return MessageResponse(message="Password reset successful.")
