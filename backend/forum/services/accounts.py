import logging
import re

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from forum.core.config import get_settings
from forum.core.database import transaction
from forum.core.exceptions import BadRequest, Conflict, InvalidCredentials
from forum.core.security import create_access_token, dummy_verify, get_password_hash, verify_password
from forum.models.user import User

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_password(password: str) -> None:
    min_length = get_settings().MIN_PASSWORD_LENGTH
    if len(password) < min_length:
        raise BadRequest(f"Password must be at least {min_length} characters")


def register_user(
    db: Session,
    username: str,
    firstname: str,
    lastname: str,
    email: str,
    password: str,
) -> User:
    if not all(v and v.strip() for v in (username, firstname, lastname, email, password)):
        raise BadRequest("All fields are required")
    validate_password(password)
    if not EMAIL_RE.match(email):
        raise BadRequest("Invalid email format")

    # Friendly pre-check; the unique constraints below are the real guard.
    existing = db.execute(
        select(User.username, User.email).where(or_(User.username == username, User.email == email))
    ).all()
    if any(row.username == username for row in existing):
        raise Conflict("Username already taken")
    if any(row.email == email for row in existing):
        raise Conflict("Email already registered")

    user = User(
        username=username,
        firstname=firstname,
        lastname=lastname,
        email=email,
        hashed_password=get_password_hash(password),
    )
    try:
        with transaction(db):
            db.add(user)
    except IntegrityError as exc:
        # Lost the race against a concurrent registration.
        logger.info("Registration conflict on unique constraint")
        raise Conflict("Username or email already registered") from exc

    logger.info("Registered user id=%s", user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> str:
    """Return a session token; one generic error for unknown email and wrong password."""
    user = db.scalars(select(User).where(User.email == email)).first()
    if user is None:
        dummy_verify()
        raise InvalidCredentials()
    if not verify_password(password, user.hashed_password):
        logger.info("Failed login for user id=%s", user.id)
        raise InvalidCredentials()

    logger.info("User id=%s logged in", user.id)
    return create_access_token(user.id)
