# tutorbook/schemas/auth.py
from pydantic import BaseModel, EmailStr, Field, field_validator

from tutorbook.core.enums import Role
from tutorbook.schemas.common import RequestModel
from tutorbook.schemas.user import UserPublic


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginRequest(RequestModel):
    email: EmailStr
    password: str


class RegisterRequest(RequestModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: str = Field(min_length=1, max_length=255)
    role: Role

    # teacher profile
    bio: str | None = None
    meeting_link: str | None = None
    subject_ids: list[int] = []

    # student profile
    grade_level: str | None = None
    parent_contact: str | None = None
    location: str | None = None

    @field_validator("role")
    @classmethod
    def no_self_registered_admins(cls, v: Role) -> Role:
        if v == Role.admin:
            raise ValueError("role must be 'teacher' or 'student'")
        return v


class AuthResult(Token):
    user: UserPublic
