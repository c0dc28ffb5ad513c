# tutorbook/api/v1/endpoints/subjects.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tutorbook.core.security import get_current_admin
from tutorbook.db.session import get_db
from tutorbook.models.subject import Subject
from tutorbook.models.user import User
from tutorbook.schemas.common import ApiResponse, ok
from tutorbook.schemas.subject import (
    PriceQuote,
    PricingTierPublic,
    PricingUpdate,
    SubjectCreate,
    SubjectPublic,
    SubjectUpdate,
)
from tutorbook.services import subject_service

router = APIRouter(tags=["subjects"])


def _subject_to_public(subject: Subject, tutor_count: int = 0) -> SubjectPublic:
    return SubjectPublic(
        id=subject.id,
        name=subject.name,
        description=subject.description,
        image=subject.image,
        is_active=subject.is_active,
        tutor_count=tutor_count,
        pricing_tiers=[PricingTierPublic.model_validate(t) for t in subject.pricing_tiers],
    )


@router.get("", response_model=ApiResponse[List[SubjectPublic]])
def list_subjects(db: Session = Depends(get_db)):
    rows = subject_service.list_subjects(db)
    return ok([_subject_to_public(s, count) for s, count in rows], with_count=True)


@router.get("/all", response_model=ApiResponse[List[SubjectPublic]])
def list_all_subjects(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    rows = subject_service.list_subjects(db, include_inactive=True)
    return ok([_subject_to_public(s, count) for s, count in rows], with_count=True)


@router.get("/{subject_id}", response_model=ApiResponse[SubjectPublic])
def get_subject(subject_id: int, db: Session = Depends(get_db)):
    subject, count = subject_service.get_subject(db, subject_id)
    return ok(_subject_to_public(subject, count))


@router.get("/{subject_id}/price", response_model=ApiResponse[PriceQuote])
def get_price(
    subject_id: int,
    grade_level: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
):
    tier = subject_service.get_price(db, subject_id=subject_id, grade_level=grade_level)
    return ok(
        PriceQuote(
            subject_id=subject_id,
            grade_level=tier.grade_level,
            price_per_hour=tier.price_per_hour,
        )
    )


@router.post(
    "",
    response_model=ApiResponse[SubjectPublic],
    status_code=status.HTTP_201_CREATED,
)
def create_subject(
    payload: SubjectCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    subject = subject_service.create_subject(db, obj_in=payload)
    return ok(_subject_to_public(subject), "Subject created successfully")


@router.put("/{subject_id}", response_model=ApiResponse[SubjectPublic])
def update_subject(
    subject_id: int,
    payload: SubjectUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    subject_service.update_subject(db, subject_id=subject_id, obj_in=payload)
    subject, count = subject_service.get_subject(db, subject_id)
    return ok(_subject_to_public(subject, count), "Subject updated successfully")


@router.put("/{subject_id}/pricing", response_model=ApiResponse[List[PricingTierPublic]])
def update_pricing(
    subject_id: int,
    payload: PricingUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """Replace every pricing tier of the subject. Existing bookings keep their price."""
    tiers = subject_service.replace_pricing(
        db, subject_id=subject_id, tiers=payload.pricing_tiers
    )
    return ok(
        [PricingTierPublic.model_validate(t) for t in tiers],
        "Pricing updated successfully",
        with_count=True,
    )


@router.delete("/{subject_id}", response_model=ApiResponse[None])
def delete_subject(
    subject_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    subject_service.deactivate_subject(db, subject_id=subject_id)
    return ok(message="Subject deactivated successfully")
