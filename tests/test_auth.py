from datetime import timedelta

from conftest import MIDDLE, PASSWORD, auth_headers
from tutorbook.core.enums import Role, VerificationStatus
from tutorbook.core.security import create_access_token
from tutorbook.models.user import User
from tutorbook.services import user_service


def test_register_student_creates_profile(client, db_session):
    res = client.post(
        "/api/auth/register",
        json={
            "email": "new@tutor.io",
            "password": "hunter22",
            "name": "New Student",
            "role": "student",
            "gradeLevel": MIDDLE,
            "parentContact": "+1 555 0100",
        },
    )

    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["data"]["access_token"]
    assert body["data"]["user"]["role"] == "student"

    user = db_session.query(User).filter(User.email == "new@tutor.io").one()
    assert user.student_profile.grade_level == MIDDLE
    assert user.student_profile.parent_contact == "+1 555 0100"
    assert user.password_hash != "hunter22"


def test_register_teacher_starts_pending(client, db_session, math_subject):
    res = client.post(
        "/api/auth/register",
        json={
            "email": "teach@tutor.io",
            "password": "hunter22",
            "name": "New Teacher",
            "role": "teacher",
            "bio": "Calculus nerd",
            "subject_ids": [math_subject.id],
        },
    )

    assert res.status_code == 201
    profile = db_session.query(User).filter(User.email == "teach@tutor.io").one().teacher_profile
    assert profile.verification_status == VerificationStatus.pending
    assert profile.is_live is False
    assert [s.name for s in profile.subjects] == ["Math"]


def test_register_with_unknown_subject_creates_nothing(client, db_session):
    res = client.post(
        "/api/auth/register",
        json={
            "email": "ghost@tutor.io",
            "password": "hunter22",
            "name": "Ghost",
            "role": "teacher",
            "subjectIds": [777],
        },
    )
    assert res.status_code == 400
    assert db_session.query(User).count() == 0


def test_register_duplicate_email(client, student):
    res = client.post(
        "/api/auth/register",
        json={"email": student.email, "password": "hunter22", "name": "Dup", "role": "student"},
    )
    assert res.status_code == 400
    assert res.json() == {"success": False, "message": "Email already registered"}


def test_register_duplicate_email_race(client, db_session, student, monkeypatch):
    # the pre-insert lookup misses, as when another request registers the same email first
    monkeypatch.setattr(user_service, "get_user_by_email", lambda db, email: None)
    res = client.post(
        "/api/auth/register",
        json={"email": student.email, "password": "hunter22", "name": "Dup", "role": "student"},
    )
    assert res.status_code == 400
    assert res.json()["message"] == "Email already registered"
    assert db_session.query(User).count() == 1


def test_cannot_register_as_admin(client):
    res = client.post(
        "/api/auth/register",
        json={"email": "boss@tutor.io", "password": "hunter22", "name": "Boss", "role": "admin"},
    )
    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["errors"]


def test_register_validation_errors(client):
    res = client.post(
        "/api/auth/register",
        json={"email": "not-an-email", "password": "123", "role": "student"},
    )
    assert res.status_code == 400
    fields = {e["field"] for e in res.json()["errors"]}
    assert {"body.email", "body.password", "body.name"} <= fields


def test_login(client, student):
    res = client.post("/api/auth/login", json={"email": student.email, "password": PASSWORD})
    assert res.status_code == 200
    token = res.json()["data"]["access_token"]

    me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["email"] == student.email


def test_login_wrong_password(client, student):
    res = client.post("/api/auth/login", json={"email": student.email, "password": "nope"})
    assert res.status_code == 401
    assert res.json()["success"] is False


def test_token_form_login(client, teacher):
    res = client.post("/api/auth/token", data={"username": teacher.email, "password": PASSWORD})
    assert res.status_code == 200
    assert res.json()["token_type"] == "bearer"


def test_missing_token(client):
    res = client.get("/api/users/me")
    assert res.status_code == 401
    assert res.json()["message"] == "Access denied. No token provided."


def test_garbage_token(client):
    res = client.get("/api/users/me", headers={"Authorization": "Bearer not.a.jwt"})
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid token"


def test_expired_token(client, student):
    token = create_access_token(
        data={"sub": str(student.id), "role": Role.student.value},
        expires_delta=timedelta(minutes=-1),
    )
    res = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401
    assert res.json()["message"] == "Token expired"


def test_token_for_deleted_user(client, db_session, make_user):
    user = make_user(Role.student, "gone@tutor.io")
    headers = auth_headers(user)
    db_session.delete(user)
    db_session.commit()

    res = client.get("/api/users/me", headers=headers)
    assert res.status_code == 401
    assert res.json()["message"] == "User not found"


def test_update_me(client, student):
    res = client.put("/api/users/me", json={"name": "Samuel"}, headers=auth_headers(student))
    assert res.status_code == 200
    assert res.json()["data"]["name"] == "Samuel"


def test_update_me_with_nothing(client, student):
    res = client.put("/api/users/me", json={}, headers=auth_headers(student))
    assert res.status_code == 400
    assert res.json()["message"] == "No fields to update"
