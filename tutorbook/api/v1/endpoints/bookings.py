# tutorbook/api/v1/endpoints/bookings.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tutorbook.core.security import get_current_student, get_current_user
from tutorbook.db.session import get_db
from tutorbook.models.booking import Booking
from tutorbook.models.user import User
from tutorbook.schemas.booking import BookingCreate, BookingPublic, BookingStatusUpdate
from tutorbook.schemas.common import ApiResponse, ok
from tutorbook.services import booking_service

router = APIRouter(tags=["bookings"])


def _booking_to_public(booking: Booking) -> BookingPublic:
    out = BookingPublic.model_validate(booking)
    if booking.subject is not None:
        out.subject_name = booking.subject.name
    if booking.teacher is not None and booking.teacher.user is not None:
        out.teacher_name = booking.teacher.user.name
        out.teacher_picture = booking.teacher.user.profile_picture
    if booking.student is not None and booking.student.user is not None:
        out.student_name = booking.student.user.name
        out.student_picture = booking.student.user.profile_picture
    return out


@router.get("", response_model=ApiResponse[List[BookingPublic]])
def list_bookings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Students get their bookings, teachers the bookings they teach, admins all."""
    bookings = booking_service.list_bookings_for_caller(db, user=current_user)
    return ok([_booking_to_public(b) for b in bookings], with_count=True)


# registered before /{booking_id} so "upcoming" is not read as an id
@router.get("/upcoming/classes", response_model=ApiResponse[List[BookingPublic]])
def list_upcoming_classes(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    bookings = booking_service.list_upcoming_classes(db, user=current_user)
    return ok([_booking_to_public(b) for b in bookings], with_count=True)


@router.get("/{booking_id}", response_model=ApiResponse[BookingPublic])
def get_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    booking = booking_service.get_booking(db, user=current_user, booking_id=booking_id)
    return ok(_booking_to_public(booking))


@router.post(
    "",
    response_model=ApiResponse[BookingPublic],
    status_code=status.HTTP_201_CREATED,
)
def create_booking(
    payload: BookingCreate,
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
):
    booking = booking_service.create_booking(db, user=current_student, obj_in=payload)
    return ok(_booking_to_public(booking), "Booking created successfully")


@router.put("/{booking_id}/status", response_model=ApiResponse[BookingPublic])
def update_booking_status(
    booking_id: int,
    payload: BookingStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    booking = booking_service.update_booking_status(
        db, user=current_user, booking_id=booking_id, new_status=payload.status
    )
    return ok(_booking_to_public(booking), "Booking status updated successfully")
