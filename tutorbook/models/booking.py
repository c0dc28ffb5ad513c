# tutorbook/models/booking.py
from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from tutorbook.core.enums import BookingStatus
from tutorbook.db.base import Base


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)

    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False)

    # copied from the student when the booking is made
    grade_level = Column(String(100), nullable=False)
    scheduled_date = Column(DateTime(timezone=True), nullable=False)
    duration = Column(Integer, nullable=False)  # minutes

    # frozen at creation, never recomputed
    price_per_hour = Column(Numeric(10, 2), nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)

    # pending_payment / payment_under_review / confirmed / completed / cancelled
    status = Column(
        Enum(BookingStatus, native_enum=False, length=50, validate_strings=True),
        nullable=False,
        default=BookingStatus.pending_payment,
        index=True,
    )
    meeting_link = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    student = relationship("StudentProfile")
    teacher = relationship("TeacherProfile")
    subject = relationship("Subject")
    payment_proofs = relationship(
        "PaymentProof",
        back_populates="booking",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PaymentProof.id",
    )
