# tutorbook/services/booking_service.py
import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from sqlalchemy.orm import Query, Session, joinedload

from tutorbook.core.config import settings
from tutorbook.core.enums import BookingStatus, Role
from tutorbook.core.exceptions import Forbidden, InvalidArgument, NotFound
from tutorbook.core.permissions import BookingAction, Caller, authorize_booking
from tutorbook.db.session import atomic
from tutorbook.models.booking import Booking
from tutorbook.models.student import StudentProfile
from tutorbook.models.teacher import TeacherProfile
from tutorbook.models.user import User
from tutorbook.schemas.booking import BookingCreate
from tutorbook.services import subject_service

logger = logging.getLogger(__name__)


def compute_total_amount(price_per_hour: Decimal, duration: int) -> Decimal:
    """Price of ``duration`` minutes at ``price_per_hour``, rounded half up to a whole unit."""
    total = Decimal(price_per_hour) * Decimal(duration) / Decimal(60)
    return total.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def parse_status(value) -> BookingStatus:
    try:
        return BookingStatus(value)
    except ValueError:
        raise InvalidArgument("Invalid status")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _with_parties(query: Query) -> Query:
    return query.options(
        joinedload(Booking.student).joinedload(StudentProfile.user),
        joinedload(Booking.teacher).joinedload(TeacherProfile.user),
        joinedload(Booking.subject),
    )


def _require_student_profile(user: User) -> StudentProfile:
    if user.role != Role.student:
        raise Forbidden("Access denied. Student only.")
    if user.student_profile is None:
        raise NotFound("Student not found")
    return user.student_profile


def _own_bookings(db: Session, caller: Caller) -> Query:
    """Bookings the caller takes part in; admins see everything."""
    query = _with_parties(db.query(Booking))
    if caller.role == Role.student:
        if caller.student_id is None:
            raise NotFound("Student not found")
        return query.filter(Booking.student_id == caller.student_id)
    if caller.role == Role.teacher:
        if caller.teacher_id is None:
            raise NotFound("Teacher not found")
        return query.filter(Booking.teacher_id == caller.teacher_id)
    if caller.is_admin:
        return query
    raise Forbidden("Not authorized")


def create_booking(
    db: Session,
    *,
    user: User,
    obj_in: BookingCreate,
) -> Booking:
    """
    Student books a teacher for a subject.

    The price comes from the pricing tier matching the student's current
    grade level; price, total and grade level are frozen on the booking.
    """
    student = _require_student_profile(user)

    min_d = settings.BOOKING_MIN_DURATION_MINUTES
    max_d = settings.BOOKING_MAX_DURATION_MINUTES
    if not min_d <= obj_in.duration <= max_d:
        raise InvalidArgument(f"Duration must be between {min_d} and {max_d} minutes")

    teacher = db.get(TeacherProfile, obj_in.teacher_id)
    if teacher is None:
        raise NotFound("Teacher not found")

    tier = subject_service.get_pricing_tier(
        db, subject_id=obj_in.subject_id, grade_level=student.grade_level
    )
    if tier is None:
        raise NotFound("Price not found for this subject and grade level")

    booking = Booking(
        student_id=student.id,
        teacher_id=teacher.id,
        subject_id=obj_in.subject_id,
        grade_level=student.grade_level,
        scheduled_date=_as_utc(obj_in.scheduled_date),
        duration=obj_in.duration,
        price_per_hour=tier.price_per_hour,
        total_amount=compute_total_amount(tier.price_per_hour, obj_in.duration),
        status=BookingStatus.pending_payment,
        meeting_link=teacher.meeting_link or "",
        notes=obj_in.notes or "",
    )
    with atomic(db):
        db.add(booking)
    db.refresh(booking)

    logger.info(
        f"Booking {booking.id} created by student {student.id} "
        f"with teacher {teacher.id}: total={booking.total_amount}"
    )
    return booking


def list_bookings_for_caller(db: Session, *, user: User) -> List[Booking]:
    caller = Caller.from_user(user)
    return (
        _own_bookings(db, caller)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .all()
    )


def _load_booking(db: Session, booking_id: int) -> Booking:
    booking: Optional[Booking] = (
        _with_parties(db.query(Booking)).filter(Booking.id == booking_id).first()
    )
    if booking is None:
        raise NotFound("Booking not found")
    return booking


def get_booking(db: Session, *, user: User, booking_id: int) -> Booking:
    booking = _load_booking(db, booking_id)
    authorize_booking(Caller.from_user(user), booking, BookingAction.view)
    return booking


def update_booking_status(
    db: Session,
    *,
    user: User,
    booking_id: int,
    new_status,
) -> Booking:
    """
    Move a booking to ``new_status`` if the caller's role allows that target.

      - admin: any status
      - the booking's student: cancelled
      - the booking's teacher: confirmed / completed
    """
    status = parse_status(new_status)
    booking = _load_booking(db, booking_id)
    authorize_booking(
        Caller.from_user(user), booking, BookingAction.update_status, target=status
    )

    previous = booking.status
    with atomic(db):
        booking.status = status
        db.add(booking)
    db.refresh(booking)

    logger.info(
        f"Booking {booking.id} status {previous.value} -> {status.value} "
        f"by user {user.id} ({user.role.value})"
    )
    return booking


def list_upcoming_classes(
    db: Session,
    *,
    user: User,
    now: Optional[datetime] = None,
) -> List[Booking]:
    """Confirmed bookings of the caller that have not started yet, soonest first."""
    caller = Caller.from_user(user)
    if caller.role not in (Role.student, Role.teacher):
        raise Forbidden("Not authorized")

    now = now or datetime.now(timezone.utc)
    return (
        _own_bookings(db, caller)
        .filter(
            Booking.status == BookingStatus.confirmed,
            Booking.scheduled_date > now,
        )
        .order_by(Booking.scheduled_date.asc(), Booking.id.asc())
        .all()
    )
