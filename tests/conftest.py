# tests/conftest.py
"""
Shared fixtures: a throwaway in-memory SQLite database per test, a handful of
users with profiles, the Math subject with two pricing tiers, and a
TestClient wired to the same session.
"""

import os

# must be set before tutorbook.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["SEED_DEFAULT_DATA"] = "false"

from decimal import Decimal
from typing import Dict

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tutorbook import models
from tutorbook.core.enums import Role, VerificationStatus
from tutorbook.core.security import create_token_for_user, get_password_hash
from tutorbook.db.base import Base
from tutorbook.db.session import get_db
from tutorbook.main import app
from tutorbook.schemas.booking import BookingCreate
from tutorbook.services import booking_service
from tutorbook.services.storage_service import AssetStore, get_asset_store

PASSWORD = "secret123"
MIDDLE = "Grade 6-8 (Middle)"
PRIMARY = "Grade 1-5 (Primary)"


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _fk_on(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def make_user(db_session):
    """Factory creating a user of ``role`` with the matching profile."""

    def _make(role: Role, email: str, name: str = "Test User", **profile) -> models.User:
        user = models.User(
            email=email,
            password_hash=get_password_hash(PASSWORD),
            name=name,
            role=role,
        )
        db_session.add(user)
        db_session.flush()
        if role == Role.teacher:
            subjects = profile.pop("subjects", [])
            teacher = models.TeacherProfile(user_id=user.id, **profile)
            teacher.subjects = subjects
            db_session.add(teacher)
        elif role == Role.student:
            db_session.add(models.StudentProfile(user_id=user.id, **profile))
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def math_subject(db_session):
    subject = models.Subject(name="Math", description="Numbers", image="/subject-math.jpg")
    subject.pricing_tiers = [
        models.PricingTier(grade_level=PRIMARY, price_per_hour=Decimal("15")),
        models.PricingTier(grade_level=MIDDLE, price_per_hour=Decimal("18")),
    ]
    db_session.add(subject)
    db_session.commit()
    db_session.refresh(subject)
    return subject


@pytest.fixture
def admin(make_user):
    return make_user(Role.admin, "admin@tutor.io", name="Ada Admin")


@pytest.fixture
def student(make_user):
    return make_user(Role.student, "sam@tutor.io", name="Sam Student", grade_level=MIDDLE)


@pytest.fixture
def other_student(make_user):
    return make_user(Role.student, "olly@tutor.io", name="Olly Student", grade_level=MIDDLE)


@pytest.fixture
def teacher(make_user, math_subject):
    return make_user(
        Role.teacher,
        "tina@tutor.io",
        name="Tina Teacher",
        bio="Ten years of algebra",
        meeting_link="https://meet.tutor.io/tina",
        verification_status=VerificationStatus.approved,
        is_live=True,
        subjects=[math_subject],
    )


@pytest.fixture
def other_teacher(make_user, math_subject):
    return make_user(
        Role.teacher,
        "theo@tutor.io",
        name="Theo Teacher",
        meeting_link="https://meet.tutor.io/theo",
        verification_status=VerificationStatus.approved,
        is_live=True,
        subjects=[math_subject],
    )


@pytest.fixture
def booking_factory(db_session, math_subject):
    def _book(student_user, teacher_user, duration=90, scheduled_date="2030-01-15T10:00:00Z"):
        return booking_service.create_booking(
            db_session,
            user=student_user,
            obj_in=BookingCreate(
                teacher_id=teacher_user.teacher_profile.id,
                subject_id=math_subject.id,
                scheduled_date=scheduled_date,
                duration=duration,
            ),
        )

    return _book


@pytest.fixture
def booking(booking_factory, student, teacher):
    return booking_factory(student, teacher)


class FakeS3Client:
    """Records put/delete calls in memory instead of talking to S3."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}

    def put_object(self, Bucket, Key, Body, ContentType):
        self.objects[Key] = Body

    def delete_object(self, Bucket, Key):
        self.objects.pop(Key, None)


@pytest.fixture
def asset_store():
    return AssetStore(
        client=FakeS3Client(),
        bucket="tutorbook-test",
        public_base_url="https://cdn.tutor.io/",
    )


@pytest.fixture
def client(db_session, asset_store):
    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_asset_store] = lambda: asset_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth_headers(user: models.User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_token_for_user(user)}"}
