# tutorbook/api/v1/endpoints/payments.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tutorbook.core.security import get_current_admin, get_current_student, get_current_user
from tutorbook.db.session import get_db
from tutorbook.models.payment import PaymentProof
from tutorbook.models.user import User
from tutorbook.schemas.common import ApiResponse, ok
from tutorbook.schemas.payment import PaymentProofCreate, PaymentProofPublic, PaymentReview
from tutorbook.services import payment_service

router = APIRouter(tags=["payments"])


def _proof_to_public(proof: PaymentProof) -> PaymentProofPublic:
    out = PaymentProofPublic.model_validate(proof)
    booking = proof.booking
    if booking is not None:
        out.total_amount = booking.total_amount
        out.subject_id = booking.subject_id
        out.subject_name = booking.subject.name if booking.subject else None
        out.student_name = booking.student.user.name if booking.student else None
        out.teacher_name = booking.teacher.user.name if booking.teacher else None
    return out


@router.get("", response_model=ApiResponse[List[PaymentProofPublic]])
def list_payments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    proofs = payment_service.list_payments(db, user=current_user)
    return ok([_proof_to_public(p) for p in proofs], with_count=True)


@router.get("/pending", response_model=ApiResponse[List[PaymentProofPublic]])
def list_pending_payments(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    proofs = payment_service.list_pending_payments(db, user=current_admin)
    return ok([_proof_to_public(p) for p in proofs], with_count=True)


@router.post(
    "",
    response_model=ApiResponse[PaymentProofPublic],
    status_code=status.HTTP_201_CREATED,
)
def submit_payment_proof(
    payload: PaymentProofCreate,
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
):
    """
    Attach an uploaded payment proof to a booking.

    The booking moves to ``payment_under_review`` together with the insert.
    """
    proof = payment_service.submit_payment_proof(db, user=current_student, obj_in=payload)
    return ok(_proof_to_public(proof), "Payment proof uploaded successfully")


@router.put("/{proof_id}/verify", response_model=ApiResponse[PaymentProofPublic])
def review_payment(
    proof_id: int,
    payload: PaymentReview,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    proof = payment_service.review_payment(
        db,
        user=current_admin,
        proof_id=proof_id,
        decision=payload.status,
        notes=payload.notes,
    )
    return ok(_proof_to_public(proof), f"Payment {payload.status.value} successfully")
