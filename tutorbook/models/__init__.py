# tutorbook/models/__init__.py
from tutorbook.models.user import User  # noqa
from tutorbook.models.subject import Subject, PricingTier  # noqa
from tutorbook.models.teacher import (  # noqa
    TeacherProfile,
    Availability,
    Document,
    teacher_subjects,
)
from tutorbook.models.student import StudentProfile  # noqa
from tutorbook.models.booking import Booking  # noqa
from tutorbook.models.payment import PaymentProof  # noqa
