# tutorbook/schemas/student.py
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from tutorbook.schemas.common import RequestModel


class StudentProfileUpdate(RequestModel):
    grade_level: str | None = None
    parent_contact: str | None = None
    location: str | None = None


class StudentProfilePublic(BaseModel):
    id: int
    user_id: int
    name: str
    email: str
    profile_picture: str | None = None
    grade_level: str | None = None
    parent_contact: str | None = None
    location: str | None = None
    created_at: datetime | None = None


class MyTeacher(BaseModel):
    id: int
    name: str
    email: str
    profile_picture: str | None = None
    bio: str | None = None
    meeting_link: str | None = None


class StudentStats(BaseModel):
    total_bookings: int
    upcoming_classes: int
    completed_classes: int
    total_spent: Decimal
    favorite_teachers: int
