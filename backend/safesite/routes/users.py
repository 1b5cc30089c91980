from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from .. import models, schemas, auth
from ..services import users as user_service

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me", response_model=schemas.UserOut)
async def read_profile(current_user: models.User = Depends(auth.get_current_user)):
    return current_user


@router.patch("/me", response_model=schemas.UserOut)
async def update_profile(
    update: schemas.UserUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    user = user_service.update_profile(
        db,
        current_user,
        first_name=update.first_name,
        last_name=update.last_name,
    )
    db.commit()
    db.refresh(user)
    return user


@router.delete("/me", response_model=schemas.MessageOut)
async def delete_account(
    db: Session = Depends(get_db),
    identity: auth.IdentityContext = Depends(auth.get_identity),
):
    user_service.delete_user(db, identity.user_id)
    db.commit()
    return schemas.MessageOut(message="Account deleted successfully")
