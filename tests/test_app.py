from fastapi.testclient import TestClient

from conftest import auth_headers
from tutorbook.db.init_db import DEFAULT_CATALOG, init_db, seed_catalog
from tutorbook.main import app
from tutorbook.models.subject import PricingTier, Subject
from tutorbook.services import report_service


def test_health(client):
    assert client.get("/api/health/live").json() == {"success": True, "data": {"status": "ok"}}
    assert client.get("/api/health/db").status_code == 200


def test_unknown_route_uses_envelope(client):
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert res.json()["success"] is False


def test_unexpected_errors_are_hidden(client, admin, monkeypatch):
    def _explode(db):
        raise RuntimeError("secret connection string in here")

    monkeypatch.setattr(report_service, "admin_stats", _explode)
    quiet = TestClient(app, raise_server_exceptions=False)

    res = quiet.get("/api/admin/stats", headers=auth_headers(admin))
    assert res.status_code == 500
    assert res.json() == {"success": False, "message": "Internal server error"}


def test_seed_catalog_runs_once(db_session):
    init_db(db_session, seed=True)
    assert db_session.query(Subject).count() == len(DEFAULT_CATALOG)
    math = db_session.query(Subject).filter(Subject.name == "Math").one()
    middle = (
        db_session.query(PricingTier)
        .filter(PricingTier.subject_id == math.id, PricingTier.grade_level == "Grade 6-8 (Middle)")
        .one()
    )
    assert middle.price_per_hour == 18

    assert seed_catalog(db_session) == 0
    assert db_session.query(Subject).count() == len(DEFAULT_CATALOG)
