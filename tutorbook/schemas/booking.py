# tutorbook/schemas/booking.py
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from tutorbook.core.enums import BookingStatus
from tutorbook.schemas.common import RequestModel


class BookingCreate(RequestModel):
    teacher_id: int
    subject_id: int
    scheduled_date: datetime
    # bounds come from settings and are checked by the booking service
    duration: int
    notes: str | None = None


class BookingStatusUpdate(RequestModel):
    status: BookingStatus


class BookingPublic(BaseModel):
    id: int
    student_id: int
    teacher_id: int
    subject_id: int
    grade_level: str
    scheduled_date: datetime
    duration: int
    price_per_hour: Decimal
    total_amount: Decimal
    status: BookingStatus
    meeting_link: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # joined for display
    subject_name: str | None = None
    teacher_name: str | None = None
    teacher_picture: str | None = None
    student_name: str | None = None
    student_picture: str | None = None

    model_config = ConfigDict(from_attributes=True)
