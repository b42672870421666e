from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from forum.core.database import get_db
from forum.core.deps import get_current_user
from forum.models.user import User
from forum.schemas.content import ContentDeleteResponse, ContentEdit, ContentEditResponse
from forum.services.ownership import delete_content, edit_content, parse_content_type

router = APIRouter(prefix="/content", tags=["content"])


@router.put("/{content_id}", response_model=ContentEditResponse)
def edit_content_route(
    content_id: str,
    payload: ContentEdit,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    content_type = parse_content_type(payload.type)
    edit_content(db, current_user.id, content_type, content_id, payload.fields())
    return ContentEditResponse(type=content_type.value, id=content_id)


@router.delete("/{content_id}", response_model=ContentDeleteResponse)
def delete_content_route(
    content_id: str,
    type_: str | None = Query(default=None, alias="type"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    content_type = parse_content_type(type_)
    message = delete_content(db, current_user.id, content_type, content_id)
    return ContentDeleteResponse(message=message)
