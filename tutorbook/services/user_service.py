# tutorbook/services/user_service.py
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tutorbook.core.enums import Role
from tutorbook.core.exceptions import InvalidArgument, NotFound
from tutorbook.core.security import get_password_hash
from tutorbook.db.session import atomic
from tutorbook.models.booking import Booking
from tutorbook.models.student import StudentProfile
from tutorbook.models.teacher import TeacherProfile
from tutorbook.models.user import User
from tutorbook.schemas.auth import RegisterRequest
from tutorbook.schemas.user import AdminUserUpdate, UserUpdate
from tutorbook.services.teacher_service import resolve_subjects

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def register_user(db: Session, *, obj_in: RegisterRequest) -> User:
    """
    Create a teacher or student account together with its profile.

    New teachers start as ``pending`` and are not listed until an admin
    approves them.
    """
    if get_user_by_email(db, obj_in.email):
        raise InvalidArgument("Email already registered")

    subjects = resolve_subjects(db, obj_in.subject_ids) if obj_in.role == Role.teacher else []

    try:
        with atomic(db):
            user = User(
                email=obj_in.email,
                password_hash=get_password_hash(obj_in.password),
                name=obj_in.name,
                role=obj_in.role,
            )
            db.add(user)
            db.flush()

            if obj_in.role == Role.teacher:
                profile = TeacherProfile(
                    user_id=user.id,
                    bio=obj_in.bio,
                    meeting_link=obj_in.meeting_link,
                )
                profile.subjects = subjects
                db.add(profile)
            else:
                db.add(
                    StudentProfile(
                        user_id=user.id,
                        grade_level=obj_in.grade_level,
                        parent_contact=obj_in.parent_contact,
                        location=obj_in.location,
                    )
                )
    except IntegrityError:
        # lost a race with a concurrent registration for the same email
        raise InvalidArgument("Email already registered") from None

    db.refresh(user)
    logger.info(f"Registered {user.role.value} user {user.id}")
    return user


def update_me(db: Session, *, user: User, obj_in: UserUpdate) -> User:
    update_data = obj_in.model_dump(exclude_unset=True, exclude_none=True)
    if not update_data:
        raise InvalidArgument("No fields to update")

    with atomic(db):
        for field, value in update_data.items():
            setattr(user, field, value)
        db.add(user)
    db.refresh(user)
    return user


def set_profile_picture(db: Session, *, user: User, url: str) -> User:
    with atomic(db):
        user.profile_picture = url
        db.add(user)
    db.refresh(user)
    return user


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def admin_update_user(db: Session, *, user_id: int, obj_in: AdminUserUpdate) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")

    if obj_in.role is not None and obj_in.role != user.role:
        raise InvalidArgument("A user's role cannot be changed")

    update_data = obj_in.model_dump(exclude_unset=True, exclude_none=True)
    update_data.pop("role", None)
    if not update_data:
        raise InvalidArgument("No fields to update")

    with atomic(db):
        for field, value in update_data.items():
            setattr(user, field, value)
        db.add(user)
    db.refresh(user)
    return user


def _has_bookings(db: Session, user: User) -> bool:
    query = db.query(Booking.id)
    if user.student_profile is not None:
        if query.filter(Booking.student_id == user.student_profile.id).first():
            return True
    if user.teacher_profile is not None:
        if query.filter(Booking.teacher_id == user.teacher_profile.id).first():
            return True
    return False


def delete_user(db: Session, *, acting_user: User, user_id: int) -> None:
    """
    Delete a user and, by cascade, its profile, documents and availability.

    Bookings are kept for reporting, so users that appear on a booking
    cannot be deleted.
    """
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    if user.id == acting_user.id:
        raise InvalidArgument("You cannot delete your own account")
    if _has_bookings(db, user):
        raise InvalidArgument("User has bookings and cannot be deleted")

    with atomic(db):
        db.delete(user)
    logger.info(f"User {user_id} deleted by admin {acting_user.id}")
