# tutorbook/services/payment_service.py
"""
Payment proofs and their review.

A proof and its booking always change together: ``submit_payment_proof`` and
``review_payment`` are the only functions that write either of them for
payment purposes, and each runs as a single transaction.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Query, Session, contains_eager

from tutorbook.core.enums import BookingStatus, PaymentStatus, ReviewDecision, Role
from tutorbook.core.exceptions import Forbidden, InvalidArgument, NotFound
from tutorbook.core.permissions import BookingAction, Caller, is_allowed
from tutorbook.db.session import atomic
from tutorbook.models.booking import Booking
from tutorbook.models.payment import PaymentProof
from tutorbook.models.student import StudentProfile
from tutorbook.models.teacher import TeacherProfile
from tutorbook.models.user import User
from tutorbook.schemas.payment import PaymentProofCreate

logger = logging.getLogger(__name__)

DEFAULT_PROOF_FILE_NAME = "payment-proof"

# booking status that follows each review decision
BOOKING_STATUS_AFTER_REVIEW = {
    ReviewDecision.approved: BookingStatus.confirmed,
    ReviewDecision.rejected: BookingStatus.pending_payment,
}


def _set_booking_status(db: Session, booking: Booking, status: BookingStatus) -> None:
    booking.status = status
    db.add(booking)
    db.flush()


def _with_booking(query: Query) -> Query:
    booking = contains_eager(PaymentProof.booking)
    return query.join(PaymentProof.booking).options(
        booking.joinedload(Booking.subject),
        booking.joinedload(Booking.student).joinedload(StudentProfile.user),
        booking.joinedload(Booking.teacher).joinedload(TeacherProfile.user),
    )


def _require_admin(user: User) -> None:
    if user.role != Role.admin:
        raise Forbidden("Access denied. Admin only.")


def parse_decision(value) -> ReviewDecision:
    try:
        return ReviewDecision(value)
    except ValueError:
        raise InvalidArgument("Status must be approved or rejected")


def submit_payment_proof(
    db: Session,
    *,
    user: User,
    obj_in: PaymentProofCreate,
) -> PaymentProof:
    """
    Student attaches a payment proof to one of their bookings.

    Inserts the proof as ``pending`` and moves the booking to
    ``payment_under_review`` in the same transaction. A booking that does not
    exist and a booking of another student both read as "not found".
    """
    if user.role != Role.student:
        raise Forbidden("Access denied. Student only.")
    if not obj_in.file_url:
        raise InvalidArgument("Booking ID and file URL are required")

    caller = Caller.from_user(user)
    booking: Optional[Booking] = db.get(Booking, obj_in.booking_id)
    if booking is None or not is_allowed(caller, booking, BookingAction.submit_payment):
        raise NotFound("Booking not found")

    with atomic(db):
        proof = PaymentProof(
            booking_id=booking.id,
            file_url=obj_in.file_url,
            file_name=obj_in.file_name or DEFAULT_PROOF_FILE_NAME,
            status=PaymentStatus.pending,
        )
        db.add(proof)
        db.flush()
        _set_booking_status(db, booking, BookingStatus.payment_under_review)

    db.refresh(proof)
    logger.info(
        f"Payment proof {proof.id} submitted for booking {booking.id} "
        f"by student {caller.student_id}"
    )
    return proof


def list_payments(db: Session, *, user: User) -> List[PaymentProof]:
    """
    Students see proofs of their bookings, teachers proofs of the bookings
    they teach, admins every proof. Newest upload first.
    """
    caller = Caller.from_user(user)
    query = _with_booking(db.query(PaymentProof))

    if caller.role == Role.student:
        if caller.student_id is None:
            raise NotFound("Student not found")
        query = query.filter(Booking.student_id == caller.student_id)
    elif caller.role == Role.teacher:
        if caller.teacher_id is None:
            raise NotFound("Teacher not found")
        query = query.filter(Booking.teacher_id == caller.teacher_id)

    return query.order_by(PaymentProof.uploaded_at.desc(), PaymentProof.id.desc()).all()


def list_pending_payments(db: Session, *, user: User) -> List[PaymentProof]:
    """Admin review queue, oldest upload first."""
    _require_admin(user)
    return (
        _with_booking(db.query(PaymentProof))
        .filter(PaymentProof.status == PaymentStatus.pending)
        .order_by(PaymentProof.uploaded_at.asc(), PaymentProof.id.asc())
        .all()
    )


def review_payment(
    db: Session,
    *,
    user: User,
    proof_id: int,
    decision,
    notes: Optional[str] = None,
) -> PaymentProof:
    """
    Admin approves or rejects a proof.

      - approved: proof -> approved, booking -> confirmed
      - rejected: proof -> rejected, booking -> pending_payment

    Both rows are written in one transaction. Reviewing an already reviewed
    proof overwrites the earlier decision.
    """
    _require_admin(user)
    decision = parse_decision(decision)

    proof: Optional[PaymentProof] = db.get(PaymentProof, proof_id)
    if proof is None:
        raise NotFound("Payment not found")

    with atomic(db):
        proof.status = PaymentStatus(decision.value)
        proof.review_notes = notes or ""
        proof.reviewed_at = datetime.now(timezone.utc)
        db.add(proof)
        db.flush()

        booking = db.get(Booking, proof.booking_id)
        _set_booking_status(db, booking, BOOKING_STATUS_AFTER_REVIEW[decision])

    db.refresh(proof)
    logger.info(
        f"Payment proof {proof.id} {decision.value} by admin {user.id}; "
        f"booking {proof.booking_id} -> {BOOKING_STATUS_AFTER_REVIEW[decision].value}"
    )
    return proof
