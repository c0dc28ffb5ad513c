from decimal import Decimal

from conftest import auth_headers

PROOF_URL = "https://cdn.tutor.io/payments/booking_1_receipt.png"


def _submit(client, student, booking_id):
    return client.post(
        "/api/payments",
        json={"bookingId": booking_id, "fileUrl": PROOF_URL, "fileName": "receipt.png"},
        headers=auth_headers(student),
    )


def test_payment_flow_approved(client, booking, student, admin):
    res = _submit(client, student, booking.id)
    assert res.status_code == 201
    proof = res.json()["data"]
    assert proof["status"] == "pending"
    assert Decimal(proof["total_amount"]) == Decimal("27")
    assert proof["subject_name"] == "Math"

    detail = client.get(f"/api/bookings/{booking.id}", headers=auth_headers(student))
    assert detail.json()["data"]["status"] == "payment_under_review"

    pending = client.get("/api/payments/pending", headers=auth_headers(admin))
    assert pending.json()["count"] == 1

    res = client.put(
        f"/api/payments/{proof['id']}/verify",
        json={"status": "approved", "notes": "ok"},
        headers=auth_headers(admin),
    )
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "approved"
    assert res.json()["message"] == "Payment approved successfully"

    detail = client.get(f"/api/bookings/{booking.id}", headers=auth_headers(student))
    assert detail.json()["data"]["status"] == "confirmed"


def test_payment_flow_rejected(client, booking, student, admin):
    proof_id = _submit(client, student, booking.id).json()["data"]["id"]

    res = client.put(
        f"/api/payments/{proof_id}/verify",
        json={"status": "rejected", "notes": "blurry"},
        headers=auth_headers(admin),
    )
    assert res.status_code == 200
    assert res.json()["data"]["review_notes"] == "blurry"

    detail = client.get(f"/api/bookings/{booking.id}", headers=auth_headers(student))
    assert detail.json()["data"]["status"] == "pending_payment"


def test_submit_for_other_students_booking(client, booking, other_student):
    res = _submit(client, other_student, booking.id)
    assert res.status_code == 404
    assert res.json()["message"] == "Booking not found"


def test_submit_requires_file_url(client, booking, student):
    res = client.post(
        "/api/payments",
        json={"bookingId": booking.id, "fileUrl": ""},
        headers=auth_headers(student),
    )
    assert res.status_code == 400


def test_verify_requires_admin(client, booking, student, teacher):
    proof_id = _submit(client, student, booking.id).json()["data"]["id"]
    res = client.put(
        f"/api/payments/{proof_id}/verify",
        json={"status": "approved"},
        headers=auth_headers(teacher),
    )
    assert res.status_code == 403
    assert res.json()["message"] == "Access denied. Admin only."


def test_verify_rejects_bad_status(client, booking, student, admin):
    proof_id = _submit(client, student, booking.id).json()["data"]["id"]
    res = client.put(
        f"/api/payments/{proof_id}/verify",
        json={"status": "pending"},
        headers=auth_headers(admin),
    )
    assert res.status_code == 400


def test_verify_missing_proof(client, admin):
    res = client.put(
        "/api/payments/404/verify",
        json={"status": "approved"},
        headers=auth_headers(admin),
    )
    assert res.status_code == 404


def test_teacher_sees_payments_for_own_bookings(client, booking, student, teacher, other_teacher):
    _submit(client, student, booking.id)
    assert client.get("/api/payments", headers=auth_headers(teacher)).json()["count"] == 1
    assert client.get("/api/payments", headers=auth_headers(other_teacher)).json()["count"] == 0
