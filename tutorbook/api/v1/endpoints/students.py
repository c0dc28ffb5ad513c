# tutorbook/api/v1/endpoints/students.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tutorbook.core.security import get_current_admin, get_current_student
from tutorbook.db.session import get_db
from tutorbook.models.student import StudentProfile
from tutorbook.models.user import User
from tutorbook.schemas.common import ApiResponse, ok
from tutorbook.schemas.student import (
    MyTeacher,
    StudentProfilePublic,
    StudentProfileUpdate,
    StudentStats,
)
from tutorbook.services import student_service

router = APIRouter(tags=["students"])


def _student_to_public(profile: StudentProfile) -> StudentProfilePublic:
    return StudentProfilePublic(
        id=profile.id,
        user_id=profile.user_id,
        name=profile.user.name,
        email=profile.user.email,
        profile_picture=profile.user.profile_picture,
        grade_level=profile.grade_level,
        parent_contact=profile.parent_contact,
        location=profile.location,
        created_at=profile.created_at,
    )


@router.get("/profile", response_model=ApiResponse[StudentProfilePublic])
def get_own_profile(
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
):
    profile = student_service.get_profile_for_user(db, current_student)
    return ok(_student_to_public(profile))


@router.put("/profile", response_model=ApiResponse[StudentProfilePublic])
def update_own_profile(
    payload: StudentProfileUpdate,
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
):
    profile = student_service.update_profile(db, user=current_student, obj_in=payload)
    return ok(_student_to_public(profile), "Profile updated successfully")


@router.get("/my-teachers", response_model=ApiResponse[List[MyTeacher]])
def list_my_teachers(
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
):
    teachers = student_service.list_my_teachers(db, user=current_student)
    data = [
        MyTeacher(
            id=t.id,
            name=t.user.name,
            email=t.user.email,
            profile_picture=t.user.profile_picture,
            bio=t.bio,
            meeting_link=t.meeting_link,
        )
        for t in teachers
    ]
    return ok(data, with_count=True)


@router.get("/stats", response_model=ApiResponse[StudentStats])
def get_stats(
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
):
    return ok(student_service.get_stats(db, user=current_student))


@router.get("/all", response_model=ApiResponse[List[StudentProfilePublic]])
def list_all_students(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    profiles = student_service.list_all_students(db)
    return ok([_student_to_public(p) for p in profiles], with_count=True)
