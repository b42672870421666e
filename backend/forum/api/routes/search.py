from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from forum.api.routes.questions import page_response
from forum.core.database import get_db
from forum.schemas.question import QuestionPageResponse
from forum.services.content import search_questions

router = APIRouter(prefix="/search", tags=["search"])


@router.get("", response_model=QuestionPageResponse)
def search(query: str = "", page: int = 1, limit: int = 20, db: Session = Depends(get_db)):
    return page_response(search_questions(db, query, page=page, limit=limit))
