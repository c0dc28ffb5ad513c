# tutorbook/services/teacher_service.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Query, Session, contains_eager, selectinload

from tutorbook.core.enums import DocumentType, ReviewDecision, Role, VerificationStatus
from tutorbook.core.exceptions import Forbidden, InvalidArgument, NotFound
from tutorbook.db.session import atomic
from tutorbook.models.subject import Subject
from tutorbook.models.teacher import Availability, Document, TeacherProfile
from tutorbook.models.user import User
from tutorbook.schemas.teacher import AvailabilitySlotIn, TeacherProfileUpdate

logger = logging.getLogger(__name__)


def _with_details(query: Query) -> Query:
    return query.join(TeacherProfile.user).options(
        contains_eager(TeacherProfile.user),
        selectinload(TeacherProfile.subjects),
        selectinload(TeacherProfile.availability),
        selectinload(TeacherProfile.documents),
    )


def resolve_subjects(db: Session, subject_ids: List[int]) -> List[Subject]:
    ids = list(dict.fromkeys(subject_ids))
    if not ids:
        return []
    subjects = db.query(Subject).filter(Subject.id.in_(ids)).all()
    missing = set(ids) - {s.id for s in subjects}
    if missing:
        raise InvalidArgument(f"Unknown subject ids: {sorted(missing)}")
    return subjects


def get_profile_for_user(db: Session, user: User) -> TeacherProfile:
    profile: Optional[TeacherProfile] = (
        _with_details(db.query(TeacherProfile))
        .filter(TeacherProfile.user_id == user.id)
        .first()
    )
    if profile is None:
        raise NotFound("Teacher profile not found")
    return profile


def list_live_teachers(db: Session, *, subject_id: Optional[int] = None) -> List[TeacherProfile]:
    """Approved teachers visible to students, by name."""
    query = _with_details(db.query(TeacherProfile)).filter(
        TeacherProfile.is_live.is_(True),
        TeacherProfile.verification_status == VerificationStatus.approved,
    )
    if subject_id is not None:
        query = query.filter(TeacherProfile.subjects.any(Subject.id == subject_id))
    return query.order_by(User.name, TeacherProfile.id).all()


def list_all_teachers(db: Session) -> List[TeacherProfile]:
    return (
        _with_details(db.query(TeacherProfile))
        .order_by(TeacherProfile.created_at.desc(), TeacherProfile.id.desc())
        .all()
    )


def list_pending_verifications(db: Session) -> List[TeacherProfile]:
    return (
        _with_details(db.query(TeacherProfile))
        .filter(TeacherProfile.verification_status == VerificationStatus.pending)
        .order_by(TeacherProfile.created_at.desc(), TeacherProfile.id.desc())
        .all()
    )


def get_live_teacher(db: Session, teacher_id: int) -> TeacherProfile:
    profile: Optional[TeacherProfile] = (
        _with_details(db.query(TeacherProfile))
        .filter(TeacherProfile.id == teacher_id, TeacherProfile.is_live.is_(True))
        .first()
    )
    if profile is None:
        raise NotFound("Teacher not found")
    return profile


def update_profile(
    db: Session,
    *,
    user: User,
    obj_in: TeacherProfileUpdate,
) -> TeacherProfile:
    update_data = obj_in.model_dump(exclude_unset=True)
    if not update_data:
        raise InvalidArgument("No fields to update")

    profile = get_profile_for_user(db, user)
    subject_ids = update_data.pop("subject_ids", None)
    subjects = resolve_subjects(db, subject_ids) if subject_ids is not None else None

    with atomic(db):
        for field, value in update_data.items():
            setattr(profile, field, value)
        if subjects is not None:
            profile.subjects = subjects
        db.add(profile)
    db.refresh(profile)
    return profile


def replace_availability(
    db: Session,
    *,
    user: User,
    slots: List[AvailabilitySlotIn],
) -> List[Availability]:
    """Replace every availability slot of the teacher in one transaction."""
    profile = get_profile_for_user(db, user)

    with atomic(db):
        db.query(Availability).filter(Availability.teacher_id == profile.id).delete(
            synchronize_session=False
        )
        for slot in slots:
            db.add(
                Availability(
                    teacher_id=profile.id,
                    day=slot.day,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    is_available=slot.is_available,
                )
            )

    db.expire(profile)
    logger.info(f"Teacher {profile.id} availability replaced with {len(slots)} slots")
    return (
        db.query(Availability)
        .filter(Availability.teacher_id == profile.id)
        .order_by(Availability.id)
        .all()
    )


def verify_teacher(
    db: Session,
    *,
    teacher_id: int,
    decision: ReviewDecision,
    notes: Optional[str] = None,
) -> TeacherProfile:
    """
    Admin approves or rejects a teacher application.

    ``is_live`` follows the decision: only approved teachers are listed.
    """
    profile = db.get(TeacherProfile, teacher_id)
    if profile is None:
        raise NotFound("Teacher not found")

    with atomic(db):
        profile.verification_status = VerificationStatus(decision.value)
        profile.verification_notes = notes or ""
        profile.is_live = decision == ReviewDecision.approved
        db.add(profile)
    db.refresh(profile)

    logger.info(f"Teacher {teacher_id} {decision.value}")
    return profile


def list_documents(db: Session, *, user: User, teacher_id: int) -> List[Document]:
    profile = db.get(TeacherProfile, teacher_id)
    if profile is None:
        raise NotFound("Teacher not found")
    if user.role != Role.admin and profile.user_id != user.id:
        raise Forbidden("Not authorized")
    return (
        db.query(Document)
        .filter(Document.teacher_id == teacher_id)
        .order_by(Document.id)
        .all()
    )


def add_document(
    db: Session,
    *,
    user: User,
    doc_type: DocumentType,
    file_url: str,
    file_name: Optional[str],
) -> Document:
    profile = db.query(TeacherProfile).filter(TeacherProfile.user_id == user.id).first()
    if profile is None:
        raise NotFound("Teacher not found")

    document = Document(
        teacher_id=profile.id,
        type=doc_type,
        file_url=file_url,
        file_name=file_name,
    )
    with atomic(db):
        db.add(document)
    db.refresh(document)
    logger.info(f"Document {document.id} ({doc_type.value}) added for teacher {profile.id}")
    return document
