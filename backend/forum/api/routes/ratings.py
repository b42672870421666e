from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from forum.core.database import get_db
from forum.core.deps import get_current_user
from forum.models.user import User
from forum.schemas.rating import RatingCreate, RatingResponse, UserRatingResponse
from forum.services.ratings import get_user_rating, submit_rating

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.post("", response_model=RatingResponse)
def rate_answer(
    payload: RatingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    summary = submit_rating(db, current_user.id, payload.answer_id, payload.rating)
    return RatingResponse(average_rating=summary.average, rating_count=summary.count)


@router.get("/{answer_id}", response_model=UserRatingResponse)
def my_rating(answer_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return UserRatingResponse(rating=get_user_rating(db, current_user.id, answer_id))
