import pytest

from tutorbook.core.enums import BookingStatus, PaymentStatus
from tutorbook.core.exceptions import Forbidden, InvalidArgument, NotFound
from tutorbook.models.booking import Booking
from tutorbook.models.payment import PaymentProof
from tutorbook.schemas.payment import PaymentProofCreate
from tutorbook.services import payment_service

PROOF_URL = "https://cdn.tutor.io/payments/booking_1_receipt.png"


def _submit(db, user, booking_id, file_url=PROOF_URL):
    return payment_service.submit_payment_proof(
        db,
        user=user,
        obj_in=PaymentProofCreate(booking_id=booking_id, file_url=file_url, file_name="receipt.png"),
    )


def test_submit_moves_booking_under_review(db_session, booking, student):
    proof = _submit(db_session, student, booking.id)

    assert proof.status == PaymentStatus.pending
    assert proof.booking_id == booking.id
    assert proof.file_url == PROOF_URL
    db_session.refresh(booking)
    assert booking.status == BookingStatus.payment_under_review


def test_submit_defaults_file_name(db_session, booking, student):
    proof = payment_service.submit_payment_proof(
        db_session,
        user=student,
        obj_in=PaymentProofCreate(booking_id=booking.id, file_url=PROOF_URL),
    )
    assert proof.file_name == payment_service.DEFAULT_PROOF_FILE_NAME


def test_submit_for_someone_elses_booking_is_not_found(db_session, booking, other_student):
    with pytest.raises(NotFound) as exc:
        _submit(db_session, other_student, booking.id)
    assert exc.value.message == "Booking not found"
    assert db_session.query(PaymentProof).count() == 0


def test_submit_for_missing_booking(db_session, student):
    with pytest.raises(NotFound):
        _submit(db_session, student, 4242)


def test_only_students_submit(db_session, booking, teacher):
    with pytest.raises(Forbidden):
        _submit(db_session, teacher, booking.id)


def test_submit_is_atomic(db_session, booking, student, monkeypatch):
    def _boom(*args, **kwargs):
        raise RuntimeError("database went away")

    monkeypatch.setattr(payment_service, "_set_booking_status", _boom)

    with pytest.raises(RuntimeError):
        _submit(db_session, student, booking.id)

    assert db_session.query(PaymentProof).count() == 0
    stored = db_session.get(Booking, booking.id)
    db_session.refresh(stored)
    assert stored.status == BookingStatus.pending_payment


def test_approve(db_session, booking, student, admin):
    proof = _submit(db_session, student, booking.id)

    reviewed = payment_service.review_payment(
        db_session, user=admin, proof_id=proof.id, decision="approved", notes="Looks good"
    )

    assert reviewed.status == PaymentStatus.approved
    assert reviewed.review_notes == "Looks good"
    assert reviewed.reviewed_at is not None
    db_session.refresh(booking)
    assert booking.status == BookingStatus.confirmed


def test_reject_returns_booking_to_pending_payment(db_session, booking, student, admin):
    proof = _submit(db_session, student, booking.id)

    reviewed = payment_service.review_payment(
        db_session, user=admin, proof_id=proof.id, decision="rejected"
    )

    assert reviewed.status == PaymentStatus.rejected
    assert reviewed.review_notes == ""
    db_session.refresh(booking)
    assert booking.status == BookingStatus.pending_payment


def test_resubmit_after_rejection(db_session, booking, student, admin):
    first = _submit(db_session, student, booking.id)
    payment_service.review_payment(db_session, user=admin, proof_id=first.id, decision="rejected")

    second = _submit(db_session, student, booking.id)
    payment_service.review_payment(db_session, user=admin, proof_id=second.id, decision="approved")

    db_session.refresh(booking)
    assert booking.status == BookingStatus.confirmed
    assert [p.status for p in booking.payment_proofs] == [
        PaymentStatus.rejected,
        PaymentStatus.approved,
    ]


def test_review_is_atomic(db_session, booking, student, admin, monkeypatch):
    proof = _submit(db_session, student, booking.id)

    def _boom(*args, **kwargs):
        raise RuntimeError("database went away")

    monkeypatch.setattr(payment_service, "_set_booking_status", _boom)
    with pytest.raises(RuntimeError):
        payment_service.review_payment(db_session, user=admin, proof_id=proof.id, decision="approved")

    db_session.refresh(proof)
    db_session.refresh(booking)
    assert proof.status == PaymentStatus.pending
    assert proof.reviewed_at is None
    assert booking.status == BookingStatus.payment_under_review


def test_review_requires_admin(db_session, booking, student, teacher):
    proof = _submit(db_session, student, booking.id)
    for user in (student, teacher):
        with pytest.raises(Forbidden):
            payment_service.review_payment(db_session, user=user, proof_id=proof.id, decision="approved")


def test_review_missing_proof(db_session, admin):
    with pytest.raises(NotFound) as exc:
        payment_service.review_payment(db_session, user=admin, proof_id=99, decision="approved")
    assert exc.value.message == "Payment not found"


def test_review_rejects_unknown_decision(db_session, booking, student, admin):
    proof = _submit(db_session, student, booking.id)
    with pytest.raises(InvalidArgument):
        payment_service.review_payment(db_session, user=admin, proof_id=proof.id, decision="pending")


def test_list_payments_by_role(
    db_session, booking_factory, student, other_student, teacher, other_teacher, admin
):
    mine = _submit(db_session, student, booking_factory(student, teacher).id)
    theirs = _submit(db_session, other_student, booking_factory(other_student, other_teacher).id)

    def ids(user):
        return {p.id for p in payment_service.list_payments(db_session, user=user)}

    assert ids(student) == {mine.id}
    assert ids(teacher) == {mine.id}
    assert ids(other_teacher) == {theirs.id}
    assert ids(admin) == {mine.id, theirs.id}


def test_pending_queue(db_session, booking_factory, student, teacher, admin):
    first = _submit(db_session, student, booking_factory(student, teacher).id)
    second = _submit(db_session, student, booking_factory(student, teacher).id)
    payment_service.review_payment(db_session, user=admin, proof_id=first.id, decision="approved")

    pending = payment_service.list_pending_payments(db_session, user=admin)
    assert [p.id for p in pending] == [second.id]
    assert pending[0].booking.subject.name == "Math"

    with pytest.raises(Forbidden):
        payment_service.list_pending_payments(db_session, user=student)
