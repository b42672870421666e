import logging
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from forum.core.database import transaction
from forum.core.exceptions import BadRequest, Conflict, Forbidden, NotFound
from forum.models.answer import Answer
from forum.models.rating import Rating

logger = logging.getLogger(__name__)

MIN_RATING = 0.0
MAX_RATING = 5.0


@dataclass(frozen=True)
class RatingSummary:
    average: float
    count: int


def round_average(value: float) -> float:
    # Half-up to one decimal: 3.75 -> 3.8.
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def validate_rating(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise BadRequest("Rating must be a number")
    value = float(value)
    if not math.isfinite(value) or value < MIN_RATING or value > MAX_RATING:
        raise BadRequest("Invalid rating value (must be between 0-5)")
    if not (value * 2).is_integer():
        raise BadRequest("Rating must be in 0.5 increments (0, 0.5, 1, 1.5, etc.)")
    return value


def rating_summary(db: Session, answer_id: int) -> RatingSummary:
    """Aggregate from every stored rating; never maintained incrementally."""
    avg, count = db.execute(
        select(func.avg(Rating.rating), func.count(Rating.id)).where(Rating.answer_id == answer_id)
    ).one()
    return RatingSummary(average=round_average(avg) if count else 0.0, count=count)


def rating_summaries(db: Session, answer_ids: list[int]) -> dict[int, RatingSummary]:
    summaries = {answer_id: RatingSummary(average=0.0, count=0) for answer_id in answer_ids}
    if not answer_ids:
        return summaries
    rows = db.execute(
        select(Rating.answer_id, func.avg(Rating.rating), func.count(Rating.id))
        .where(Rating.answer_id.in_(answer_ids))
        .group_by(Rating.answer_id)
    ).all()
    for answer_id, avg, count in rows:
        summaries[answer_id] = RatingSummary(average=round_average(avg), count=count)
    return summaries


def submit_rating(db: Session, user_id: int, answer_id: int, value) -> RatingSummary:
    value = validate_rating(value)

    try:
        with transaction(db):
            owner_id = db.scalar(select(Answer.user_id).where(Answer.id == answer_id).with_for_update())
            if owner_id is None:
                raise NotFound("Answer not found")
            if owner_id == user_id:
                raise Forbidden("You cannot rate your own answer")

            rating = db.scalars(
                select(Rating).where(Rating.answer_id == answer_id, Rating.user_id == user_id)
            ).first()
            if rating is None:
                db.add(Rating(answer_id=answer_id, user_id=user_id, rating=value))
            else:
                rating.rating = value
    except IntegrityError as exc:
        # A concurrent first rating by the same user won the insert.
        logger.info("Rating race on answer id=%s user id=%s", answer_id, user_id)
        raise Conflict("Rating was updated concurrently, please retry") from exc

    return rating_summary(db, answer_id)


def get_user_rating(db: Session, user_id: int, answer_id: int) -> float:
    value = db.scalar(select(Rating.rating).where(Rating.answer_id == answer_id, Rating.user_id == user_id))
    return value or 0.0
