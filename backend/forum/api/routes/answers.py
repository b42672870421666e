import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from forum.core.database import get_db
from forum.core.deps import get_current_user, get_notifier
from forum.core.exceptions import NotificationError
from forum.models.user import User
from forum.schemas.answer import AnswerCreate, AnswerCreated, AnswerListResponse
from forum.services.content import create_answer, list_answers
from forum.services.notifications import Notifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/answers", tags=["answers"])


@router.get("/{questionid}", response_model=AnswerListResponse)
def get_answers(questionid: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return AnswerListResponse(answers=list_answers(db, questionid))


@router.post("", response_model=AnswerCreated, status_code=status.HTTP_201_CREATED)
def post_answer(
    payload: AnswerCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier),
):
    posted = create_answer(db, current_user, payload.questionid, payload.answer)

    # The answer is committed; a queue outage must not turn it into an error.
    if posted.notify_email:
        try:
            notifier.send_new_answer(
                posted.notify_email,
                posted.question.title,
                posted.question.questionid,
                posted.answer.answer,
            )
        except NotificationError:
            logger.warning("New answer notification dropped for answer id=%s", posted.answer.id)

    return AnswerCreated(answerid=posted.answer.id)
