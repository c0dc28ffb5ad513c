# tutorbook/schemas/teacher.py
from datetime import datetime, time

from pydantic import BaseModel, ConfigDict, model_validator

from tutorbook.core.enums import DocumentType, ReviewDecision, VerificationStatus, Weekday
from tutorbook.schemas.common import RequestModel


class SubjectRef(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class AvailabilitySlotIn(RequestModel):
    day: Weekday
    start_time: time
    end_time: time
    is_available: bool = True

    @model_validator(mode="after")
    def end_after_start(self) -> "AvailabilitySlotIn":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class AvailabilityUpdate(RequestModel):
    availability: list[AvailabilitySlotIn]


class AvailabilitySlotPublic(BaseModel):
    id: int
    day: Weekday
    start_time: time
    end_time: time
    is_available: bool

    model_config = ConfigDict(from_attributes=True)


class DocumentPublic(BaseModel):
    id: int
    teacher_id: int
    type: DocumentType
    file_url: str
    file_name: str | None = None
    uploaded_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class TeacherProfileUpdate(RequestModel):
    bio: str | None = None
    meeting_link: str | None = None
    subject_ids: list[int] | None = None


class TeacherVerify(RequestModel):
    status: ReviewDecision
    notes: str | None = None


class TeacherPublic(BaseModel):
    """Teacher as shown to students: profile joined with the user row."""

    id: int
    user_id: int
    name: str
    email: str
    profile_picture: str | None = None
    bio: str | None = None
    verification_status: VerificationStatus
    is_live: bool
    meeting_link: str | None = None
    subjects: list[SubjectRef] = []


class TeacherAdminView(TeacherPublic):
    verification_notes: str | None = None
    created_at: datetime | None = None


class TeacherDetail(TeacherPublic):
    availability: list[AvailabilitySlotPublic] = []


class TeacherOwnProfile(TeacherDetail):
    verification_notes: str | None = None
    documents: list[DocumentPublic] = []
