# tutorbook/schemas/user.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from tutorbook.core.enums import Role
from tutorbook.schemas.common import RequestModel


class UserPublic(BaseModel):
    id: int
    email: EmailStr
    name: str
    role: Role
    profile_picture: str | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class UserUpdate(RequestModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)


class AdminUserUpdate(UserUpdate):
    # accepted so a role change can be refused explicitly
    role: Role | None = None
