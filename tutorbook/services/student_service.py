# tutorbook/services/student_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import distinct, func
from sqlalchemy.orm import Session, joinedload

from tutorbook.core.enums import PAID_BOOKING_STATUSES, BookingStatus
from tutorbook.core.exceptions import InvalidArgument, NotFound
from tutorbook.db.session import atomic
from tutorbook.models.booking import Booking
from tutorbook.models.student import StudentProfile
from tutorbook.models.teacher import TeacherProfile
from tutorbook.models.user import User
from tutorbook.schemas.student import StudentProfileUpdate, StudentStats


def get_profile_for_user(db: Session, user: User) -> StudentProfile:
    profile: Optional[StudentProfile] = (
        db.query(StudentProfile)
        .options(joinedload(StudentProfile.user))
        .filter(StudentProfile.user_id == user.id)
        .first()
    )
    if profile is None:
        raise NotFound("Student profile not found")
    return profile


def update_profile(
    db: Session,
    *,
    user: User,
    obj_in: StudentProfileUpdate,
) -> StudentProfile:
    """
    Change grade level / contact / location.

    Existing bookings keep the grade level and price they were made with.
    """
    update_data = obj_in.model_dump(exclude_unset=True)
    if not update_data:
        raise InvalidArgument("No fields to update")

    profile = get_profile_for_user(db, user)
    with atomic(db):
        for field, value in update_data.items():
            setattr(profile, field, value)
        db.add(profile)
    db.refresh(profile)
    return profile


def list_my_teachers(db: Session, *, user: User) -> List[TeacherProfile]:
    """Teachers the student has a confirmed or completed booking with."""
    profile = get_profile_for_user(db, user)
    teacher_ids = (
        db.query(distinct(Booking.teacher_id))
        .filter(
            Booking.student_id == profile.id,
            Booking.status.in_(PAID_BOOKING_STATUSES),
        )
        .scalar_subquery()
    )
    return (
        db.query(TeacherProfile)
        .options(joinedload(TeacherProfile.user))
        .filter(TeacherProfile.id.in_(teacher_ids))
        .order_by(TeacherProfile.id)
        .all()
    )


def get_stats(
    db: Session,
    *,
    user: User,
    now: Optional[datetime] = None,
) -> StudentStats:
    profile = get_profile_for_user(db, user)
    now = now or datetime.now(timezone.utc)
    mine = db.query(Booking).filter(Booking.student_id == profile.id)

    total_spent = (
        db.query(func.coalesce(func.sum(Booking.total_amount), 0))
        .filter(
            Booking.student_id == profile.id,
            Booking.status.in_(PAID_BOOKING_STATUSES),
        )
        .scalar()
    )
    favorite_teachers = (
        db.query(func.count(distinct(Booking.teacher_id)))
        .filter(
            Booking.student_id == profile.id,
            Booking.status.in_(PAID_BOOKING_STATUSES),
        )
        .scalar()
    )

    return StudentStats(
        total_bookings=mine.count(),
        upcoming_classes=mine.filter(
            Booking.status == BookingStatus.confirmed,
            Booking.scheduled_date > now,
        ).count(),
        completed_classes=mine.filter(Booking.status == BookingStatus.completed).count(),
        total_spent=Decimal(str(total_spent or 0)),
        favorite_teachers=favorite_teachers or 0,
    )


def list_all_students(db: Session) -> List[StudentProfile]:
    return (
        db.query(StudentProfile)
        .options(joinedload(StudentProfile.user))
        .order_by(StudentProfile.created_at.desc(), StudentProfile.id.desc())
        .all()
    )
