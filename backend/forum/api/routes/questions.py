from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from forum.core.database import get_db
from forum.core.deps import get_current_user
from forum.models.question import Question
from forum.models.user import User
from forum.schemas.question import QuestionCreate, QuestionCreated, QuestionPageResponse, QuestionResponse
from forum.services.content import QuestionPage, create_question, get_question, list_questions

router = APIRouter(prefix="/questions", tags=["questions"])


def question_response(question: Question) -> QuestionResponse:
    return QuestionResponse(
        id=question.id,
        questionid=question.questionid,
        userid=question.user_id,
        username=question.user.username,
        title=question.title,
        description=question.description,
        tag=question.tag,
        category=question.category.name if question.category else None,
        created_at=question.created_at,
        updated_at=question.updated_at,
    )


def page_response(page: QuestionPage) -> QuestionPageResponse:
    return QuestionPageResponse(
        questions=[question_response(q) for q in page.questions],
        total_pages=page.total_pages,
    )


@router.get("", response_model=QuestionPageResponse)
def list_questions_route(
    page: int = 1,
    limit: int = 10,
    search: str = "",
    category: str = "",
    db: Session = Depends(get_db),
):
    return page_response(list_questions(db, page=page, limit=limit, search=search, category=category))


@router.get("/{questionid}", response_model=QuestionResponse)
def get_question_route(questionid: str, db: Session = Depends(get_db)):
    return question_response(get_question(db, questionid))


@router.post("", response_model=QuestionCreated, status_code=status.HTTP_201_CREATED)
def post_question(
    payload: QuestionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    question = create_question(
        db,
        current_user,
        title=payload.title,
        description=payload.description,
        tag=payload.tag,
        category=payload.category,
    )
    return QuestionCreated(questionid=question.questionid)
