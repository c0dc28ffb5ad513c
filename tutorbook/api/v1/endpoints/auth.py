# tutorbook/api/v1/endpoints/auth.py
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from tutorbook.core.exceptions import Unauthenticated
from tutorbook.core.security import authenticate_user, create_token_for_user
from tutorbook.db.session import get_db
from tutorbook.schemas.auth import AuthResult, LoginRequest, RegisterRequest, Token
from tutorbook.schemas.common import ApiResponse, ok
from tutorbook.schemas.user import UserPublic
from tutorbook.services import user_service

router = APIRouter(tags=["auth"])


def _auth_result(user) -> AuthResult:
    return AuthResult(
        access_token=create_token_for_user(user),
        user=UserPublic.model_validate(user),
    )


@router.post(
    "/register",
    response_model=ApiResponse[AuthResult],
    status_code=status.HTTP_201_CREATED,
)
def register_user(payload: RegisterRequest, db: Session = Depends(get_db)):
    """
    Create a teacher or student account with its profile.

    Admin accounts are never created through this endpoint.
    """
    user = user_service.register_user(db, obj_in=payload)
    return ok(_auth_result(user), "Registration successful")


# JSON body login used by the frontend
@router.post("/login", response_model=ApiResponse[AuthResult])
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate_user(db, payload.email, payload.password)
    if not user:
        raise Unauthenticated("Invalid email or password")
    return ok(_auth_result(user), "Login successful")


# OAuth2 form login for the Swagger "Authorize" button; username is the email
@router.post("/token", response_model=Token)
def login_for_access_token_form(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    user = authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise Unauthenticated("Invalid email or password")
    return Token(access_token=create_token_for_user(user))
