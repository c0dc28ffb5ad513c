# tutorbook/models/payment.py
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from tutorbook.core.enums import PaymentStatus
from tutorbook.db.base import Base


class PaymentProof(Base):
    __tablename__ = "payment_proofs"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )

    file_url = Column(String(500), nullable=False)
    file_name = Column(String(255), nullable=True)

    # pending / approved / rejected
    status = Column(
        Enum(PaymentStatus, native_enum=False, length=20, validate_strings=True),
        nullable=False,
        default=PaymentStatus.pending,
        index=True,
    )
    review_notes = Column(Text, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())

    booking = relationship("Booking", back_populates="payment_proofs")
