# tutorbook/core/security.py
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

import jwt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from tutorbook.core.config import settings
from tutorbook.core.enums import Role
from tutorbook.core.exceptions import Forbidden, Unauthenticated
from tutorbook.db.session import get_db
from tutorbook.models.user import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_PREFIX}/auth/token", auto_error=False
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    user = db.query(User).filter(User.email == email).first()
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_token_for_user(user: User) -> str:
    return create_access_token(data={"sub": str(user.id), "role": user.role.value})


def decode_access_token(token: str) -> int:
    """Return the user id carried by ``token``.

    Raises Unauthenticated for expired, malformed or tampered tokens.
    """
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token expired")
    except jwt.PyJWTError:
        raise Unauthenticated("Invalid token")

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError):
        raise Unauthenticated("Invalid token")


def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    if not token:
        raise Unauthenticated("Access denied. No token provided.")

    user_id = decode_access_token(token)
    user = db.get(User, user_id)
    if user is None:
        raise Unauthenticated("User not found")
    return user


def require_role(*roles: Role) -> Callable[..., User]:
    """Build a dependency that only lets users with one of ``roles`` through."""
    allowed = set(roles)
    label = " or ".join(r.value.capitalize() for r in roles)

    def _dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            logger.info(
                f"User {current_user.id} with role {current_user.role.value} "
                f"denied access ({label} only)"
            )
            raise Forbidden(f"Access denied. {label} only.")
        return current_user

    return _dependency


get_current_admin = require_role(Role.admin)
get_current_teacher = require_role(Role.teacher)
get_current_student = require_role(Role.student)
