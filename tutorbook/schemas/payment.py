# tutorbook/schemas/payment.py
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from tutorbook.core.enums import PaymentStatus, ReviewDecision
from tutorbook.schemas.common import RequestModel


class PaymentProofCreate(RequestModel):
    booking_id: int
    file_url: str = Field(min_length=1, max_length=500)
    file_name: str | None = Field(default=None, max_length=255)


class PaymentReview(RequestModel):
    status: ReviewDecision
    notes: str | None = None


class PaymentProofPublic(BaseModel):
    id: int
    booking_id: int
    file_url: str
    file_name: str | None = None
    status: PaymentStatus
    review_notes: str | None = None
    reviewed_at: datetime | None = None
    uploaded_at: datetime | None = None

    # joined from the booking
    total_amount: Decimal | None = None
    subject_id: int | None = None
    subject_name: str | None = None
    student_name: str | None = None
    teacher_name: str | None = None

    model_config = ConfigDict(from_attributes=True)
