"""Ownership-checked edit and delete of questions and answers.

Every operation runs LOAD -> AUTHORIZE -> MUTATE -> COMMIT inside one
transaction:

* LOAD re-reads the current owner from storage with a row lock; a missing row
  aborts with ``NotFound``.
* AUTHORIZE compares that owner with the authenticated caller; a mismatch
  aborts with ``Forbidden``.
* MUTATE is a statement scoped to ``id`` *and* ``user_id``; zero affected rows
  means the row changed under us and aborts with ``Conflict``.
* Any exception rolls the whole transaction back.
"""
import enum
import logging
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from forum.core.database import transaction
from forum.core.exceptions import BadRequest, Conflict, Forbidden, NotFound
from forum.core.security import utcnow
from forum.models.answer import Answer
from forum.models.question import Question
from forum.models.rating import Rating

logger = logging.getLogger(__name__)


class ContentType(str, enum.Enum):
    question = "question"
    answer = "answer"


def parse_content_type(value: str | None) -> ContentType:
    """Validate the caller-supplied discriminator before any query runs."""
    try:
        return ContentType(value)
    except ValueError:
        raise BadRequest("Invalid or missing content type") from None


def _answer_pk(content_id: str) -> int:
    try:
        return int(content_id)
    except (TypeError, ValueError):
        raise NotFound("Answer not found") from None


def _load_owner(db: Session, content_type: ContentType, content_id: str) -> tuple[int, int]:
    """Return ``(row id, owner id)`` of the target, locked for the transaction."""
    if content_type is ContentType.question:
        row = db.execute(
            select(Question.id, Question.user_id).where(Question.questionid == content_id).with_for_update()
        ).first()
        if row is None:
            raise NotFound("Question not found")
    else:
        row = db.execute(
            select(Answer.id, Answer.user_id).where(Answer.id == _answer_pk(content_id)).with_for_update()
        ).first()
        if row is None:
            raise NotFound("Answer not found")
    return row.id, row.user_id


def _authorize(content_type: ContentType, owner_id: int, user_id: int, action: str) -> None:
    if owner_id != user_id:
        logger.warning(
            "Ownership mismatch on %s %s: owner=%s caller=%s", action, content_type.value, owner_id, user_id
        )
        raise Forbidden(f"You are not authorized to {action} this {content_type.value}")


def _require_affected(result, content_type: ContentType) -> None:
    if result.rowcount == 0:
        logger.warning("Lost race mutating %s", content_type.value)
        raise Conflict(f"The {content_type.value} was changed by another request, please retry")


def _required_text(fields: dict[str, Any], name: str) -> str:
    value = fields.get(name)
    if not isinstance(value, str) or not value.strip():
        raise BadRequest(f"{name} is required")
    return value.strip()


def _question_changes(fields: dict[str, Any]) -> dict[str, Any]:
    tag = fields.get("tag")
    if tag is not None and not isinstance(tag, str):
        raise BadRequest("tag must be a string")
    # Full replacement: an omitted tag clears it.
    return {
        "title": _required_text(fields, "title"),
        "description": _required_text(fields, "description"),
        "tag": (tag or "").strip() or None,
    }


def _answer_changes(fields: dict[str, Any]) -> dict[str, Any]:
    return {"answer": _required_text(fields, "answer")}


def edit_content(
    db: Session,
    user_id: int,
    content_type: ContentType,
    content_id: str,
    fields: dict[str, Any],
) -> Question | Answer:
    model = Question if content_type is ContentType.question else Answer

    with transaction(db):
        row_id, owner_id = _load_owner(db, content_type, content_id)
        _authorize(content_type, owner_id, user_id, "edit")
        # Non-owners get Forbidden whatever the payload.
        changes = _question_changes(fields) if content_type is ContentType.question else _answer_changes(fields)

        result = db.execute(
            update(model)
            .where(model.id == row_id, model.user_id == user_id)
            .values(**changes, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        _require_affected(result, content_type)
        updated = db.get(model, row_id, populate_existing=True)

    logger.info("User id=%s edited %s id=%s", user_id, content_type.value, row_id)
    return updated


def _purge_answers(db: Session, question_pk: int) -> None:
    answer_ids = select(Answer.id).where(Answer.question_id == question_pk)
    db.execute(delete(Rating).where(Rating.answer_id.in_(answer_ids)).execution_options(synchronize_session=False))
    db.execute(delete(Answer).where(Answer.question_id == question_pk).execution_options(synchronize_session=False))


def _remove_question(db: Session, question_pk: int, user_id: int):
    return db.execute(
        delete(Question)
        .where(Question.id == question_pk, Question.user_id == user_id)
        .execution_options(synchronize_session=False)
    )


def _remove_answer(db: Session, answer_pk: int, user_id: int):
    db.execute(delete(Rating).where(Rating.answer_id == answer_pk).execution_options(synchronize_session=False))
    return db.execute(
        delete(Answer)
        .where(Answer.id == answer_pk, Answer.user_id == user_id)
        .execution_options(synchronize_session=False)
    )


def delete_content(db: Session, user_id: int, content_type: ContentType, content_id: str) -> str:
    with transaction(db):
        row_id, owner_id = _load_owner(db, content_type, content_id)
        _authorize(content_type, owner_id, user_id, "delete")

        if content_type is ContentType.question:
            # Dependents first; the question row goes last.
            _purge_answers(db, row_id)
            result = _remove_question(db, row_id, user_id)
            message = "Question and associated answers deleted successfully"
        else:
            result = _remove_answer(db, row_id, user_id)
            message = "Answer deleted successfully"
        _require_affected(result, content_type)

    logger.info("User id=%s deleted %s id=%s", user_id, content_type.value, row_id)
    return message
