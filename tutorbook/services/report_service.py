# tutorbook/services/report_service.py
"""
Read-only dashboard queries for admins.
"""

from collections import OrderedDict
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, aliased

from tutorbook.core.enums import (
    PAID_BOOKING_STATUSES,
    BookingStatus,
    PaymentStatus,
    VerificationStatus,
)
from tutorbook.models.booking import Booking
from tutorbook.models.payment import PaymentProof
from tutorbook.models.student import StudentProfile
from tutorbook.models.subject import Subject
from tutorbook.models.teacher import TeacherProfile
from tutorbook.models.user import User
from tutorbook.schemas.report import (
    ActivityItem,
    AdminStats,
    RevenueByMonth,
    RevenueBySubject,
    RevenueReport,
)

RECENT_PER_KIND = 5
RECENT_TOTAL = 10


def _revenue(db: Session) -> Decimal:
    total = (
        db.query(func.coalesce(func.sum(Booking.total_amount), 0))
        .filter(Booking.status.in_(PAID_BOOKING_STATUSES))
        .scalar()
    )
    return Decimal(str(total or 0))


def admin_stats(db: Session) -> AdminStats:
    return AdminStats(
        total_teachers=db.query(TeacherProfile).count(),
        pending_verifications=db.query(TeacherProfile)
        .filter(TeacherProfile.verification_status == VerificationStatus.pending)
        .count(),
        total_students=db.query(StudentProfile).count(),
        pending_payments=db.query(PaymentProof)
        .filter(PaymentProof.status == PaymentStatus.pending)
        .count(),
        total_bookings=db.query(Booking).count(),
        completed_classes=db.query(Booking)
        .filter(Booking.status == BookingStatus.completed)
        .count(),
        total_subjects=db.query(Subject).count(),
        active_subjects=db.query(Subject).filter(Subject.is_active.is_(True)).count(),
        total_revenue=_revenue(db),
    )


def recent_activity(db: Session) -> List[ActivityItem]:
    """
    Latest teacher applications, bookings and payment uploads merged into a
    single feed, newest first.
    """
    student_user = aliased(User)
    teacher_user = aliased(User)
    items: List[ActivityItem] = []

    teachers = (
        db.query(TeacherProfile, User)
        .join(User, TeacherProfile.user_id == User.id)
        .order_by(TeacherProfile.created_at.desc(), TeacherProfile.id.desc())
        .limit(RECENT_PER_KIND)
        .all()
    )
    for profile, user in teachers:
        items.append(
            ActivityItem(
                id=profile.id,
                type="teacher_application",
                status=profile.verification_status.value,
                created_at=profile.created_at,
                name=user.name,
                email=user.email,
            )
        )

    bookings = (
        db.query(Booking, student_user.name, teacher_user.name, Subject.name)
        .join(StudentProfile, Booking.student_id == StudentProfile.id)
        .join(student_user, StudentProfile.user_id == student_user.id)
        .join(TeacherProfile, Booking.teacher_id == TeacherProfile.id)
        .join(teacher_user, TeacherProfile.user_id == teacher_user.id)
        .join(Subject, Booking.subject_id == Subject.id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .limit(RECENT_PER_KIND)
        .all()
    )
    for booking, student_name, teacher_name, subject_name in bookings:
        items.append(
            ActivityItem(
                id=booking.id,
                type="booking",
                status=booking.status.value,
                created_at=booking.created_at,
                student_name=student_name,
                teacher_name=teacher_name,
                subject_name=subject_name,
            )
        )

    payments = (
        db.query(PaymentProof, student_user.name, Booking.total_amount)
        .join(Booking, PaymentProof.booking_id == Booking.id)
        .join(StudentProfile, Booking.student_id == StudentProfile.id)
        .join(student_user, StudentProfile.user_id == student_user.id)
        .order_by(PaymentProof.uploaded_at.desc(), PaymentProof.id.desc())
        .limit(RECENT_PER_KIND)
        .all()
    )
    for proof, student_name, total_amount in payments:
        items.append(
            ActivityItem(
                id=proof.id,
                type="payment",
                status=proof.status.value,
                created_at=proof.uploaded_at,
                student_name=student_name,
                total_amount=total_amount,
            )
        )

    items = sorted(
        items,
        key=lambda item: item.created_at.timestamp() if item.created_at else float("-inf"),
        reverse=True,
    )
    return items[:RECENT_TOTAL]


def revenue_report(
    db: Session,
    *,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> RevenueReport:
    """
    Revenue of confirmed and completed bookings, by subject and by month of
    booking creation. The window only applies when both bounds are given.
    """
    filters = [Booking.status.in_(PAID_BOOKING_STATUSES)]
    if start_date is not None and end_date is not None:
        filters.append(Booking.created_at.between(start_date, end_date))

    revenue = func.sum(Booking.total_amount)
    by_subject_rows = (
        db.query(Subject.name, func.count(Booking.id), revenue)
        .join(Subject, Booking.subject_id == Subject.id)
        .filter(*filters)
        .group_by(Subject.id, Subject.name)
        .order_by(revenue.desc(), Subject.name)
        .all()
    )
    by_subject = [
        RevenueBySubject(
            subject=name,
            booking_count=count,
            total_revenue=Decimal(str(total or 0)),
        )
        for name, count, total in by_subject_rows
    ]

    # month bucketing in Python keeps this portable across database backends
    months: "OrderedDict[str, list]" = OrderedDict()
    rows = (
        db.query(Booking.created_at, Booking.total_amount)
        .filter(*filters)
        .order_by(Booking.created_at.desc())
        .all()
    )
    for created_at, total_amount in rows:
        if created_at is None:
            continue
        bucket = months.setdefault(created_at.strftime("%Y-%m"), [0, Decimal(0)])
        bucket[0] += 1
        bucket[1] += Decimal(str(total_amount))

    by_month = [
        RevenueByMonth(month=month, booking_count=count, total_revenue=total)
        for month, (count, total) in months.items()
    ]
    return RevenueReport(by_subject=by_subject, by_month=by_month)
