# tutorbook/core/enums.py
from enum import Enum


class Role(str, Enum):
    admin = "admin"
    teacher = "teacher"
    student = "student"


class VerificationStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class BookingStatus(str, Enum):
    pending_payment = "pending_payment"
    payment_under_review = "payment_under_review"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"


class PaymentStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class ReviewDecision(str, Enum):
    """Outcome an admin may give a teacher application or a payment proof."""

    approved = "approved"
    rejected = "rejected"


class DocumentType(str, Enum):
    degree = "degree"
    certificate = "certificate"
    identity = "identity"


class Weekday(str, Enum):
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"
    sunday = "sunday"


# Bookings that count as paid for revenue and "my teachers"
PAID_BOOKING_STATUSES = (BookingStatus.confirmed, BookingStatus.completed)
