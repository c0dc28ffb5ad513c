# tutorbook/services/subject_service.py
import logging
from typing import List, Optional

from sqlalchemy import distinct, func
from sqlalchemy.orm import Session, selectinload

from tutorbook.core.exceptions import InvalidArgument, NotFound
from tutorbook.db.session import atomic
from tutorbook.models.subject import DEFAULT_SUBJECT_IMAGE, PricingTier, Subject
from tutorbook.models.teacher import teacher_subjects
from tutorbook.schemas.subject import PricingTierIn, SubjectCreate, SubjectUpdate

logger = logging.getLogger(__name__)


def _check_unique_grades(tiers: List[PricingTierIn]) -> None:
    seen = set()
    for tier in tiers:
        if tier.grade_level in seen:
            raise InvalidArgument(f"Duplicate pricing tier for grade level '{tier.grade_level}'")
        seen.add(tier.grade_level)


def _subjects_with_tutor_count(db: Session):
    return (
        db.query(Subject, func.count(distinct(teacher_subjects.c.teacher_id)))
        .outerjoin(teacher_subjects, teacher_subjects.c.subject_id == Subject.id)
        .options(selectinload(Subject.pricing_tiers))
        .group_by(Subject.id)
    )


def list_subjects(
    db: Session,
    *,
    include_inactive: bool = False,
) -> List[tuple[Subject, int]]:
    """Subjects by name with the number of teachers offering each."""
    query = _subjects_with_tutor_count(db)
    if not include_inactive:
        query = query.filter(Subject.is_active.is_(True))
    return [(s, count) for s, count in query.order_by(Subject.name).all()]


def get_subject(db: Session, subject_id: int) -> tuple[Subject, int]:
    row = _subjects_with_tutor_count(db).filter(Subject.id == subject_id).first()
    if row is None:
        raise NotFound("Subject not found")
    return row[0], row[1]


def get_pricing_tier(
    db: Session,
    *,
    subject_id: int,
    grade_level: Optional[str],
) -> Optional[PricingTier]:
    if not grade_level:
        return None
    return (
        db.query(PricingTier)
        .filter(
            PricingTier.subject_id == subject_id,
            PricingTier.grade_level == grade_level,
        )
        .first()
    )


def get_price(db: Session, *, subject_id: int, grade_level: Optional[str]) -> PricingTier:
    if not grade_level:
        raise InvalidArgument("Grade level is required")
    tier = get_pricing_tier(db, subject_id=subject_id, grade_level=grade_level)
    if tier is None:
        raise NotFound("Price not found for this subject and grade level")
    return tier


def create_subject(db: Session, *, obj_in: SubjectCreate) -> Subject:
    """Admin creates a subject together with its pricing tiers."""
    _check_unique_grades(obj_in.pricing_tiers)

    with atomic(db):
        subject = Subject(
            name=obj_in.name,
            description=obj_in.description or "",
            image=obj_in.image or DEFAULT_SUBJECT_IMAGE,
            is_active=True,
        )
        db.add(subject)
        db.flush()
        for tier in obj_in.pricing_tiers:
            db.add(
                PricingTier(
                    subject_id=subject.id,
                    grade_level=tier.grade_level,
                    price_per_hour=tier.price_per_hour,
                )
            )

    db.refresh(subject)
    logger.info(
        f"Subject {subject.id} '{subject.name}' created with "
        f"{len(obj_in.pricing_tiers)} pricing tiers"
    )
    return subject


def update_subject(db: Session, *, subject_id: int, obj_in: SubjectUpdate) -> Subject:
    update_data = obj_in.model_dump(exclude_unset=True, exclude_none=True)
    if not update_data:
        raise InvalidArgument("No fields to update")

    subject = db.get(Subject, subject_id)
    if subject is None:
        raise NotFound("Subject not found")

    with atomic(db):
        for field, value in update_data.items():
            setattr(subject, field, value)
        db.add(subject)
    db.refresh(subject)
    return subject


def replace_pricing(
    db: Session,
    *,
    subject_id: int,
    tiers: List[PricingTierIn],
) -> List[PricingTier]:
    """Swap every pricing tier of a subject for ``tiers`` in one transaction.

    Existing bookings keep the price they were created with.
    """
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise NotFound("Subject not found")
    _check_unique_grades(tiers)

    with atomic(db):
        db.query(PricingTier).filter(PricingTier.subject_id == subject_id).delete(
            synchronize_session=False
        )
        db.flush()
        for tier in tiers:
            db.add(
                PricingTier(
                    subject_id=subject_id,
                    grade_level=tier.grade_level,
                    price_per_hour=tier.price_per_hour,
                )
            )

    db.expire(subject)
    logger.info(f"Pricing for subject {subject_id} replaced with {len(tiers)} tiers")
    return (
        db.query(PricingTier)
        .filter(PricingTier.subject_id == subject_id)
        .order_by(PricingTier.grade_level)
        .all()
    )


def deactivate_subject(db: Session, *, subject_id: int) -> Subject:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise NotFound("Subject not found")

    with atomic(db):
        subject.is_active = False
        db.add(subject)
    logger.info(f"Subject {subject_id} deactivated")
    return subject
