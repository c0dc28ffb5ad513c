# tutorbook/models/teacher.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from tutorbook.core.enums import DocumentType, VerificationStatus, Weekday
from tutorbook.db.base import Base

teacher_subjects = Table(
    "teacher_subjects",
    Base.metadata,
    Column("id", Integer, primary_key=True),
    Column(
        "teacher_id",
        Integer,
        ForeignKey("teachers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column(
        "subject_id",
        Integer,
        ForeignKey("subjects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    UniqueConstraint("teacher_id", "subject_id", name="uq_teacher_subject"),
)


class TeacherProfile(Base):
    __tablename__ = "teachers"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    bio = Column(Text, nullable=True)

    verification_status = Column(
        Enum(VerificationStatus, native_enum=False, length=20, validate_strings=True),
        nullable=False,
        default=VerificationStatus.pending,
        index=True,
    )
    verification_notes = Column(Text, nullable=True)

    # only written by the admin verification action
    is_live = Column(Boolean, nullable=False, default=False, index=True)
    meeting_link = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    user = relationship("User", back_populates="teacher_profile")
    subjects = relationship(
        "Subject",
        secondary=teacher_subjects,
        back_populates="teachers",
        order_by="Subject.name",
    )
    availability = relationship(
        "Availability",
        back_populates="teacher",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Availability.id",
    )
    documents = relationship(
        "Document",
        back_populates="teacher",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Document.id",
    )


class Availability(Base):
    __tablename__ = "availability"

    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(
        Integer, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day = Column(
        Enum(Weekday, native_enum=False, length=20, validate_strings=True),
        nullable=False,
    )
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)

    teacher = relationship("TeacherProfile", back_populates="availability")


class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(
        Integer, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type = Column(
        Enum(DocumentType, native_enum=False, length=50, validate_strings=True),
        nullable=False,
    )
    file_url = Column(String(500), nullable=False)
    file_name = Column(String(255), nullable=True)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())

    teacher = relationship("TeacherProfile", back_populates="documents")
