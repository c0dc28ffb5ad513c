# tutorbook/core/permissions.py
"""
Who may do what to a booking.

Every booking operation resolves the caller once with ``Caller.from_user``
and asks ``authorize_booking`` (raising) or ``is_allowed`` (boolean) with the
action it is about to perform.

Status matrix for ``BookingAction.update_status``:

    admin            -> any status
    owning student   -> cancelled
    owning teacher   -> confirmed, completed
    anyone else      -> nothing

The booking's current status is not consulted.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from tutorbook.core.enums import BookingStatus, Role
from tutorbook.core.exceptions import Forbidden
from tutorbook.models.booking import Booking
from tutorbook.models.user import User


class BookingAction(str, Enum):
    view = "view"
    update_status = "update_status"
    submit_payment = "submit_payment"


ALL_STATUSES = frozenset(BookingStatus)
STUDENT_STATUS_TARGETS = frozenset({BookingStatus.cancelled})
TEACHER_STATUS_TARGETS = frozenset({BookingStatus.confirmed, BookingStatus.completed})


@dataclass(frozen=True)
class Caller:
    user_id: int
    role: Role
    student_id: Optional[int] = None
    teacher_id: Optional[int] = None

    @classmethod
    def from_user(cls, user: User) -> "Caller":
        student = user.student_profile if user.role == Role.student else None
        teacher = user.teacher_profile if user.role == Role.teacher else None
        return cls(
            user_id=user.id,
            role=user.role,
            student_id=student.id if student is not None else None,
            teacher_id=teacher.id if teacher is not None else None,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin


def booking_party(caller: Caller, booking: Booking) -> Optional[Role]:
    """Return the side of ``booking`` the caller is on, if any."""
    if (
        caller.role == Role.student
        and caller.student_id is not None
        and caller.student_id == booking.student_id
    ):
        return Role.student
    if (
        caller.role == Role.teacher
        and caller.teacher_id is not None
        and caller.teacher_id == booking.teacher_id
    ):
        return Role.teacher
    return None


def can_view_booking(caller: Caller, booking: Booking) -> bool:
    return caller.is_admin or booking_party(caller, booking) is not None


def allowed_status_targets(caller: Caller, booking: Booking) -> frozenset:
    if caller.is_admin:
        return ALL_STATUSES
    party = booking_party(caller, booking)
    if party == Role.student:
        return STUDENT_STATUS_TARGETS
    if party == Role.teacher:
        return TEACHER_STATUS_TARGETS
    return frozenset()


def is_allowed(
    caller: Caller,
    booking: Booking,
    action: BookingAction,
    target: Optional[BookingStatus] = None,
) -> bool:
    if action == BookingAction.view:
        return can_view_booking(caller, booking)
    if action == BookingAction.update_status:
        return target is not None and target in allowed_status_targets(caller, booking)
    if action == BookingAction.submit_payment:
        return booking_party(caller, booking) == Role.student
    return False


def authorize_booking(
    caller: Caller,
    booking: Booking,
    action: BookingAction,
    target: Optional[BookingStatus] = None,
) -> None:
    if not is_allowed(caller, booking, action, target):
        raise Forbidden("Not authorized")
