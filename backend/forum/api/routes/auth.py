from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from forum.core.config import get_settings
from forum.core.database import get_db
from forum.core.deps import get_current_user
from forum.core.rate_limit import limiter
from forum.models.user import User
from forum.schemas.auth import LoginRequest, MeResponse, RegisterResponse, TokenResponse, UserCreate
from forum.services.accounts import authenticate, register_user

router = APIRouter(prefix="/users", tags=["auth"])
settings = get_settings()


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.REGISTER_RATE_LIMIT)
def register(request: Request, payload: UserCreate, db: Session = Depends(get_db)):
    user = register_user(
        db,
        username=payload.username,
        firstname=payload.firstname,
        lastname=payload.lastname,
        email=payload.email,
        password=payload.password,
    )
    return RegisterResponse(userid=user.id)


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
def login(request: Request, payload: LoginRequest, db: Session = Depends(get_db)):
    token = authenticate(db, payload.email, payload.password)
    return TokenResponse(token=token)


@router.get("/checkUser", response_model=MeResponse)
def check_user(current_user: User = Depends(get_current_user)):
    return MeResponse(
        userid=current_user.id,
        username=current_user.username,
        firstname=current_user.firstname,
        email=current_user.email,
    )
