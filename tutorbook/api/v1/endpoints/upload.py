# tutorbook/api/v1/endpoints/upload.py
import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from tutorbook.core.enums import DocumentType, Role
from tutorbook.core.exceptions import Forbidden, NotFound
from tutorbook.core.permissions import BookingAction, Caller, is_allowed
from tutorbook.core.security import get_current_student, get_current_teacher, get_current_user
from tutorbook.db.session import get_db
from tutorbook.models.booking import Booking
from tutorbook.models.user import User
from tutorbook.schemas.common import ApiResponse, ok
from tutorbook.schemas.teacher import DocumentPublic
from tutorbook.schemas.upload import UploadedAsset
from tutorbook.services import teacher_service, user_service
from tutorbook.services.storage_service import (
    DOCUMENT_FOLDER,
    PAYMENT_FOLDER,
    PROFILE_FOLDER,
    AssetStore,
    StoredAsset,
    build_key,
    get_asset_store,
    validate_content_type,
    validate_size,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["upload"])


def _store_upload(store: AssetStore, file: UploadFile, folder: str, prefix: str) -> StoredAsset:
    validate_content_type(file.content_type)
    payload = file.file.read()
    validate_size(len(payload))
    key = build_key(folder, prefix, file.content_type)
    return store.upload(payload, file.content_type, key)


@router.post("/profile-picture", response_model=ApiResponse[UploadedAsset])
def upload_profile_picture(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    store: AssetStore = Depends(get_asset_store),
):
    asset = _store_upload(store, file, PROFILE_FOLDER, f"user_{current_user.id}")
    user_service.set_profile_picture(db, user=current_user, url=asset.url)
    return ok(UploadedAsset(url=asset.url, key=asset.key), "Profile picture uploaded successfully")


@router.post("/document", response_model=ApiResponse[DocumentPublic])
def upload_document(
    file: UploadFile = File(...),
    doc_type: DocumentType = Form(..., alias="type"),
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
    store: AssetStore = Depends(get_asset_store),
):
    """Teacher uploads a degree, certificate or identity document for verification."""
    asset = _store_upload(
        store, file, DOCUMENT_FOLDER, f"teacher_{current_teacher.id}_{doc_type.value}"
    )
    document = teacher_service.add_document(
        db,
        user=current_teacher,
        doc_type=doc_type,
        file_url=asset.url,
        file_name=file.filename,
    )
    return ok(DocumentPublic.model_validate(document), "Document uploaded successfully")


@router.post("/payment-proof", response_model=ApiResponse[UploadedAsset])
def upload_payment_proof(
    file: UploadFile = File(...),
    booking_id: int = Form(...),
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
    store: AssetStore = Depends(get_asset_store),
):
    """
    Store the proof file only. The client then posts the returned URL to
    ``/api/payments`` to attach it to the booking.
    """
    booking = db.get(Booking, booking_id)
    if booking is None or not is_allowed(
        Caller.from_user(current_student), booking, BookingAction.submit_payment
    ):
        raise NotFound("Booking not found")

    asset = _store_upload(store, file, PAYMENT_FOLDER, f"booking_{booking_id}")
    return ok(UploadedAsset(url=asset.url, key=asset.key), "File uploaded successfully")


def _owns_key(db: Session, user: User, key: str) -> bool:
    """Admins may delete any asset, everyone else only the ones they uploaded."""
    if user.role == Role.admin:
        return True
    folder, _, name = key.rpartition("/")
    if name.startswith((f"user_{user.id}_", f"teacher_{user.id}_")):
        return True
    if folder == PAYMENT_FOLDER and name.startswith("booking_"):
        booking_id = name.split("_")[1]
        if not booking_id.isdigit():
            return False
        booking = db.get(Booking, int(booking_id))
        return booking is not None and is_allowed(
            Caller.from_user(user), booking, BookingAction.submit_payment
        )
    return False


@router.delete("/{key:path}", response_model=ApiResponse[None])
def delete_file(
    key: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    store: AssetStore = Depends(get_asset_store),
):
    if not _owns_key(db, current_user, key):
        raise Forbidden("Not authorized")
    store.delete(key)
    logger.info(f"User {current_user.id} deleted asset {key}")
    return ok(message="File deleted successfully")
