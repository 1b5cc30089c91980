from fastapi import APIRouter, Depends, Request, status
import os
from sqlalchemy.orm import Session
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..database import get_db
from .. import schemas
from ..auth import issue_token_for
from ..services import users as user_service

limiter = Limiter(key_func=get_remote_address)
testing = os.getenv("TESTING") == "1"


def rate_limit(limit: str):
    if testing:
        def wrapper(func):
            return func
        return wrapper
    return limiter.limit(limit)


router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
@rate_limit("5/minute")
async def register(request: Request, payload: schemas.RegisterRequest, db: Session = Depends(get_db)):
    user = user_service.register_user(
        db,
        email=payload.email,
        username=payload.username,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    db.commit()
    db.refresh(user)
    return schemas.AuthResponse(
        message="Welcome to SafeSite! Your account is active.",
        user=schemas.UserOut.model_validate(user),
        token=issue_token_for(user),
    )


@router.post("/login", response_model=schemas.AuthResponse)
@rate_limit("10/minute")
async def login(request: Request, payload: schemas.LoginRequest, db: Session = Depends(get_db)):
    user = user_service.authenticate(db, username=payload.username, password=payload.password)
    return schemas.AuthResponse(
        message="Access granted. Stay safe out there.",
        user=schemas.UserOut.model_validate(user),
        token=issue_token_for(user),
    )
