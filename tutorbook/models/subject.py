# tutorbook/models/subject.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from tutorbook.db.base import Base

DEFAULT_SUBJECT_IMAGE = "/subject-default.jpg"


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    image = Column(String(500), nullable=True, default=DEFAULT_SUBJECT_IMAGE)

    # soft delete: inactive subjects stay around for historical bookings
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    pricing_tiers = relationship(
        "PricingTier",
        back_populates="subject",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PricingTier.grade_level",
    )
    teachers = relationship(
        "TeacherProfile",
        secondary="teacher_subjects",
        back_populates="subjects",
    )


class PricingTier(Base):
    __tablename__ = "pricing_tiers"
    __table_args__ = (
        UniqueConstraint("subject_id", "grade_level", name="uq_pricing_subject_grade"),
    )

    id = Column(Integer, primary_key=True, index=True)
    subject_id = Column(
        Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    grade_level = Column(String(100), nullable=False)
    price_per_hour = Column(Numeric(10, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    subject = relationship("Subject", back_populates="pricing_tiers")
