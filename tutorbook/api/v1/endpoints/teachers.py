# tutorbook/api/v1/endpoints/teachers.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tutorbook.core.security import get_current_admin, get_current_teacher, get_current_user
from tutorbook.db.session import get_db
from tutorbook.models.teacher import TeacherProfile
from tutorbook.models.user import User
from tutorbook.schemas.common import ApiResponse, ok
from tutorbook.schemas.teacher import (
    AvailabilitySlotPublic,
    AvailabilityUpdate,
    DocumentPublic,
    SubjectRef,
    TeacherAdminView,
    TeacherDetail,
    TeacherOwnProfile,
    TeacherProfileUpdate,
    TeacherPublic,
    TeacherVerify,
)
from tutorbook.services import teacher_service

router = APIRouter(tags=["teachers"])


def _public_fields(profile: TeacherProfile) -> dict:
    return {
        "id": profile.id,
        "user_id": profile.user_id,
        "name": profile.user.name,
        "email": profile.user.email,
        "profile_picture": profile.user.profile_picture,
        "bio": profile.bio,
        "verification_status": profile.verification_status,
        "is_live": profile.is_live,
        "meeting_link": profile.meeting_link,
        "subjects": [SubjectRef.model_validate(s) for s in profile.subjects],
    }


def teacher_to_public(profile: TeacherProfile) -> TeacherPublic:
    return TeacherPublic(**_public_fields(profile))


def teacher_to_admin_view(profile: TeacherProfile) -> TeacherAdminView:
    return TeacherAdminView(
        **_public_fields(profile),
        verification_notes=profile.verification_notes,
        created_at=profile.created_at,
    )


def _availability(profile: TeacherProfile) -> List[AvailabilitySlotPublic]:
    return [AvailabilitySlotPublic.model_validate(a) for a in profile.availability]


@router.get("", response_model=ApiResponse[List[TeacherPublic]])
def list_teachers(
    subject_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
):
    """Approved teachers that are live, optionally only those teaching ``subject_id``."""
    profiles = teacher_service.list_live_teachers(db, subject_id=subject_id)
    return ok([teacher_to_public(p) for p in profiles], with_count=True)


@router.get("/all", response_model=ApiResponse[List[TeacherAdminView]])
def list_all_teachers(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    profiles = teacher_service.list_all_teachers(db)
    return ok([teacher_to_admin_view(p) for p in profiles], with_count=True)


def _own_profile(profile: TeacherProfile) -> TeacherOwnProfile:
    return TeacherOwnProfile(
        **_public_fields(profile),
        availability=_availability(profile),
        verification_notes=profile.verification_notes,
        documents=[DocumentPublic.model_validate(d) for d in profile.documents],
    )


@router.get("/profile", response_model=ApiResponse[TeacherOwnProfile])
def get_own_profile(
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    profile = teacher_service.get_profile_for_user(db, current_teacher)
    return ok(_own_profile(profile))


@router.put("/profile", response_model=ApiResponse[TeacherOwnProfile])
def update_own_profile(
    payload: TeacherProfileUpdate,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    profile = teacher_service.update_profile(db, user=current_teacher, obj_in=payload)
    return ok(_own_profile(profile), "Profile updated successfully")


@router.put("/availability", response_model=ApiResponse[List[AvailabilitySlotPublic]])
def replace_availability(
    payload: AvailabilityUpdate,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    slots = teacher_service.replace_availability(
        db, user=current_teacher, slots=payload.availability
    )
    return ok(
        [AvailabilitySlotPublic.model_validate(s) for s in slots],
        "Availability updated successfully",
        with_count=True,
    )


@router.get("/{teacher_id}", response_model=ApiResponse[TeacherDetail])
def get_teacher(teacher_id: int, db: Session = Depends(get_db)):
    profile = teacher_service.get_live_teacher(db, teacher_id)
    return ok(TeacherDetail(**_public_fields(profile), availability=_availability(profile)))


@router.put("/{teacher_id}/verify", response_model=ApiResponse[TeacherAdminView])
def verify_teacher(
    teacher_id: int,
    payload: TeacherVerify,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """
    Approve or reject a teacher application.

    Approval puts the teacher live; rejection takes them off the listing.
    """
    profile = teacher_service.verify_teacher(
        db, teacher_id=teacher_id, decision=payload.status, notes=payload.notes
    )
    return ok(teacher_to_admin_view(profile), f"Teacher {payload.status.value} successfully")


@router.get("/{teacher_id}/documents", response_model=ApiResponse[List[DocumentPublic]])
def list_documents(
    teacher_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    documents = teacher_service.list_documents(db, user=current_user, teacher_id=teacher_id)
    return ok([DocumentPublic.model_validate(d) for d in documents], with_count=True)
