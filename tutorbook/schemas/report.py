# tutorbook/schemas/report.py
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class AdminStats(BaseModel):
    total_teachers: int
    pending_verifications: int
    total_students: int
    pending_payments: int
    total_bookings: int
    completed_classes: int
    total_subjects: int
    active_subjects: int
    total_revenue: Decimal


class ActivityItem(BaseModel):
    id: int
    type: str  # teacher_application / booking / payment
    status: str
    created_at: datetime | None = None
    name: str | None = None
    email: str | None = None
    student_name: str | None = None
    teacher_name: str | None = None
    subject_name: str | None = None
    total_amount: Decimal | None = None


class RevenueBySubject(BaseModel):
    subject: str
    booking_count: int
    total_revenue: Decimal


class RevenueByMonth(BaseModel):
    month: str  # YYYY-MM
    booking_count: int
    total_revenue: Decimal


class RevenueReport(BaseModel):
    by_subject: list[RevenueBySubject]
    by_month: list[RevenueByMonth]
