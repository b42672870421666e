from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from forum.core.database import get_db
from forum.core.deps import get_current_user
from forum.models.user import User
from forum.schemas.category import CategoryListResponse, CategoryResponse
from forum.services.content import list_categories

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=CategoryListResponse)
def get_categories(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return CategoryListResponse(categories=[CategoryResponse.model_validate(c) for c in list_categories(db)])
