import math
from dataclasses import dataclass

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, joinedload

from forum.core.database import transaction
from forum.core.exceptions import BadRequest, NotFound
from forum.models.answer import Answer
from forum.models.category import Category
from forum.models.question import Question
from forum.models.user import User
from forum.services.ratings import rating_summaries

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass
class QuestionPage:
    questions: list[Question]
    total_pages: int


@dataclass
class PostedAnswer:
    answer: Answer
    question: Question
    # Owner's email for the "new answer" notification; None when the answerer owns the question.
    notify_email: str | None


def _clean(value: str | None) -> str:
    return (value or "").strip()


def _contains(text: str) -> str:
    # LIKE pattern that treats % and _ in the user's text literally.
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _page_bounds(page: int, limit: int) -> tuple[int, int]:
    if page < 1 or limit < 1:
        raise BadRequest("page and limit must be positive")
    limit = min(limit, MAX_PAGE_SIZE)
    return (page - 1) * limit, limit


def _paginate(db: Session, stmt, page: int, limit: int) -> QuestionPage:
    offset, limit = _page_bounds(page, limit)
    total = db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    rows = db.scalars(
        stmt.options(joinedload(Question.user), joinedload(Question.category))
        .order_by(Question.created_at.desc(), Question.id.desc())
        .offset(offset)
        .limit(limit)
    ).all()
    return QuestionPage(questions=list(rows), total_pages=math.ceil(total / limit) if total else 0)


def create_question(
    db: Session,
    user: User,
    title: str,
    description: str,
    tag: str | None = None,
    category: str | None = None,
) -> Question:
    title, description, tag = _clean(title), _clean(description), _clean(tag) or None
    if not title or not description:
        raise BadRequest("Title and description required")

    with transaction(db):
        category_row = None
        if category and category.strip():
            category_row = db.scalars(select(Category).where(Category.name == category.strip())).first()
            if category_row is None:
                raise BadRequest("Invalid category")

        question = Question(
            user_id=user.id,
            category_id=category_row.id if category_row else None,
            title=title,
            description=description,
            tag=tag,
        )
        db.add(question)
    return question


def list_questions(
    db: Session,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    search: str = "",
    category: str = "",
) -> QuestionPage:
    stmt = select(Question)
    if search:
        pattern = _contains(search)
        stmt = stmt.where(
            or_(
                Question.title.ilike(pattern, escape="\\"),
                Question.description.ilike(pattern, escape="\\"),
            )
        )
    if category:
        category_id = db.scalar(select(Category.id).where(Category.name == category))
        if category_id is None:
            return QuestionPage(questions=[], total_pages=0)
        stmt = stmt.where(Question.category_id == category_id)
    return _paginate(db, stmt, page, limit)


def search_questions(db: Session, query: str, page: int = 1, limit: int = 20) -> QuestionPage:
    query = _clean(query)
    if not query:
        raise BadRequest("Search query is required")
    pattern = _contains(query)
    stmt = select(Question).where(
        or_(
            Question.title.ilike(pattern, escape="\\"),
            Question.description.ilike(pattern, escape="\\"),
            Question.tag.ilike(pattern, escape="\\"),
        )
    )
    return _paginate(db, stmt, page, limit)


def get_question(db: Session, questionid: str) -> Question:
    question = db.scalars(
        select(Question)
        .options(joinedload(Question.user), joinedload(Question.category))
        .where(Question.questionid == questionid)
    ).first()
    if question is None:
        raise NotFound("Question not found")
    return question


def create_answer(db: Session, user: User, questionid: str, body: str) -> PostedAnswer:
    body = _clean(body)
    if not questionid or not body:
        raise BadRequest("Question ID and answer required")

    with transaction(db):
        # Lock the parent so a concurrent delete cannot orphan the new answer.
        question = db.scalars(
            select(Question).where(Question.questionid == questionid).with_for_update()
        ).first()
        if question is None:
            raise NotFound("Question not found")

        answer = Answer(question_id=question.id, user_id=user.id, answer=body)
        db.add(answer)

        notify_email = None
        if question.user_id != user.id:
            notify_email = db.scalar(select(User.email).where(User.id == question.user_id))

    return PostedAnswer(answer=answer, question=question, notify_email=notify_email)


def list_answers(db: Session, questionid: str) -> list[dict]:
    question_pk = db.scalar(select(Question.id).where(Question.questionid == questionid))
    if question_pk is None:
        raise NotFound("Question not found")

    answers = db.scalars(
        select(Answer)
        .options(joinedload(Answer.user))
        .where(Answer.question_id == question_pk)
        .order_by(Answer.created_at, Answer.id)
    ).all()
    summaries = rating_summaries(db, [a.id for a in answers])
    return [
        {
            "answerid": a.id,
            "questionid": questionid,
            "userid": a.user_id,
            "username": a.user.username,
            "answer": a.answer,
            "created_at": a.created_at,
            "updated_at": a.updated_at,
            "averageRating": summaries[a.id].average,
            "ratingCount": summaries[a.id].count,
        }
        for a in answers
    ]


def list_categories(db: Session) -> list[Category]:
    return list(db.scalars(select(Category).order_by(Category.name)).all())
