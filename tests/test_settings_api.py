import pytest
from fastapi.testclient import TestClient

from backend.app.db.base import Base
from backend.app.db.session import engine
from backend.app.main import app
from backend.app.models.system_settings import SystemSettings


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def tokens():
    client = TestClient(app)
    client.post("/auth/register", json={"email": "admin@example.com", "password": "secret"})
    admin = client.post("/auth/login", json={"email": "admin@example.com", "password": "secret"}).json()["access_token"]
    client.post(
        "/staff",
        json={"email": "coach@example.com", "first_name": "Coach", "last_name": "C", "password": "staffpass"},
        headers=auth(admin),
    )
    staff = client.post("/auth/login", json={"email": "coach@example.com", "password": "staffpass"}).json()["access_token"]
    return client, admin, staff


def test_system_settings_default_when_unset(tokens):
    client, _, staff = tokens
    response = client.get("/settings/system", headers=auth(staff))
    assert response.status_code == 200
    data = response.json()
    assert data["formula_source"] == "defaults"
    assert data["default_interaction_days"] == 30
    assert data["foundations_interaction_days"] == 14
    assert data["cohort_phase_map"] == {}


def test_admin_updates_formula_and_phases(tokens):
    client, admin, staff = tokens
    response = client.put(
        "/settings/system",
        json={"foundations_interaction_days": 10, "enable_priority_escalation": False, "cohort_phase_map": {"3": "Liftoff"}},
        headers=auth(admin),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["formula_source"] == "configured"
    assert data["foundations_interaction_days"] == 10
    assert data["enable_priority_escalation"] is False
    assert data["liftoff_interaction_days"] == 21
    assert data["cohort_phase_map"] == {"3": "liftoff"}

    assert client.get("/settings/system", headers=auth(staff)).json()["foundations_interaction_days"] == 10


def test_invalid_formula_values_are_rejected(tokens):
    client, admin, _ = tokens
    assert client.put("/settings/system", json={"default_interaction_days": 0}, headers=auth(admin)).status_code == 422
    response = client.put("/settings/system", json={"cohort_phase_map": {"3": "moonshot"}}, headers=auth(admin))
    assert response.status_code == 422


def test_non_admin_cannot_update_settings(tokens):
    client, _, staff = tokens
    assert client.put("/settings/system", json={"default_interaction_days": 5}, headers=auth(staff)).status_code == 403
    assert client.put("/settings/email", json={"bcc_admin": True}, headers=auth(staff)).status_code == 403


def test_storage_failure_reports_fallback_source(tokens):
    client, _, staff = tokens
    SystemSettings.__table__.drop(bind=engine)
    data = client.get("/settings/system", headers=auth(staff)).json()
    assert data["formula_source"] == "fallback"
    assert data["default_interaction_days"] == 30


def test_email_settings_round_trip(tokens):
    client, admin, staff = tokens
    assert client.get("/settings/email", headers=auth(staff)).json() == {
        "from_email": None,
        "admin_email": None,
        "bcc_admin": False,
        "templates": [],
    }

    payload = {
        "from_email": "tracker@example.com",
        "admin_email": "admin@example.com",
        "bcc_admin": True,
        "templates": [{"name": "Welcome", "subject": "Hello", "body": "Welcome aboard"}],
    }
    response = client.put("/settings/email", json=payload, headers=auth(admin))
    assert response.status_code == 200
    assert response.json() == payload
    assert client.get("/settings/email", headers=auth(staff)).json() == payload


def test_email_templates_need_all_fields(tokens):
    client, admin, _ = tokens
    response = client.put(
        "/settings/email",
        json={"templates": [{"name": "Welcome", "subject": "Hello", "body": ""}]},
        headers=auth(admin),
    )
    assert response.status_code == 422
