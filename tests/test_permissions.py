import pytest

from tutorbook.core.enums import BookingStatus, Role
from tutorbook.core.exceptions import Forbidden
from tutorbook.core.permissions import (
    BookingAction,
    Caller,
    allowed_status_targets,
    authorize_booking,
    can_view_booking,
    is_allowed,
)
from tutorbook.models.booking import Booking

ADMIN = Caller(user_id=1, role=Role.admin)
OWNER_STUDENT = Caller(user_id=2, role=Role.student, student_id=10)
OTHER_STUDENT = Caller(user_id=3, role=Role.student, student_id=11)
OWNER_TEACHER = Caller(user_id=4, role=Role.teacher, teacher_id=20)
OTHER_TEACHER = Caller(user_id=5, role=Role.teacher, teacher_id=21)
# a teacher whose profile id happens to equal the booking's student id
CONFUSED_TEACHER = Caller(user_id=6, role=Role.teacher, teacher_id=10)


@pytest.fixture
def booking():
    return Booking(id=1, student_id=10, teacher_id=20, status=BookingStatus.pending_payment)


@pytest.mark.parametrize(
    "caller,expected",
    [
        (ADMIN, True),
        (OWNER_STUDENT, True),
        (OWNER_TEACHER, True),
        (OTHER_STUDENT, False),
        (OTHER_TEACHER, False),
        (CONFUSED_TEACHER, False),
    ],
)
def test_view(booking, caller, expected):
    assert can_view_booking(caller, booking) is expected
    assert is_allowed(caller, booking, BookingAction.view) is expected


@pytest.mark.parametrize(
    "caller,target,expected",
    [
        (ADMIN, BookingStatus.pending_payment, True),
        (ADMIN, BookingStatus.payment_under_review, True),
        (ADMIN, BookingStatus.confirmed, True),
        (ADMIN, BookingStatus.completed, True),
        (ADMIN, BookingStatus.cancelled, True),
        (OWNER_STUDENT, BookingStatus.cancelled, True),
        (OWNER_STUDENT, BookingStatus.confirmed, False),
        (OWNER_STUDENT, BookingStatus.completed, False),
        (OWNER_TEACHER, BookingStatus.confirmed, True),
        (OWNER_TEACHER, BookingStatus.completed, True),
        (OWNER_TEACHER, BookingStatus.cancelled, False),
        (OTHER_STUDENT, BookingStatus.cancelled, False),
        (OTHER_TEACHER, BookingStatus.completed, False),
    ],
)
def test_status_matrix(booking, caller, target, expected):
    assert is_allowed(caller, booking, BookingAction.update_status, target) is expected


def test_status_matrix_ignores_current_status(booking):
    booking.status = BookingStatus.cancelled
    assert is_allowed(OWNER_TEACHER, booking, BookingAction.update_status, BookingStatus.confirmed)


def test_update_status_needs_a_target(booking):
    assert not is_allowed(ADMIN, booking, BookingAction.update_status)


def test_allowed_targets_for_strangers_is_empty(booking):
    assert allowed_status_targets(OTHER_STUDENT, booking) == frozenset()
    assert allowed_status_targets(ADMIN, booking) == frozenset(BookingStatus)


def test_only_owning_student_may_submit_payment(booking):
    assert is_allowed(OWNER_STUDENT, booking, BookingAction.submit_payment)
    assert not is_allowed(OTHER_STUDENT, booking, BookingAction.submit_payment)
    assert not is_allowed(OWNER_TEACHER, booking, BookingAction.submit_payment)
    assert not is_allowed(ADMIN, booking, BookingAction.submit_payment)


def test_authorize_booking_raises_forbidden(booking):
    authorize_booking(OWNER_STUDENT, booking, BookingAction.view)
    with pytest.raises(Forbidden) as exc:
        authorize_booking(OTHER_STUDENT, booking, BookingAction.view)
    assert exc.value.message == "Not authorized"
    assert exc.value.status_code == 403
