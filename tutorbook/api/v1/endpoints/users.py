# tutorbook/api/v1/endpoints/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tutorbook.core.security import get_current_user
from tutorbook.db.session import get_db
from tutorbook.models.user import User
from tutorbook.schemas.common import ApiResponse, ok
from tutorbook.schemas.user import UserPublic, UserUpdate
from tutorbook.services import user_service

router = APIRouter(tags=["users"])


@router.get("/me", response_model=ApiResponse[UserPublic])
def read_me(current_user: User = Depends(get_current_user)):
    return ok(UserPublic.model_validate(current_user))


@router.put("/me", response_model=ApiResponse[UserPublic])
def update_me(
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = user_service.update_me(db, user=current_user, obj_in=payload)
    return ok(UserPublic.model_validate(user), "Profile updated successfully")
