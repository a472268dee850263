import pytest
from fastapi.testclient import TestClient

from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.student import Student
from backend.app.models.user import User


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def bootstrap_admin(client: TestClient) -> str:
    client.post("/auth/register", json={"email": "admin@example.com", "password": "secret"})
    return client.post("/auth/login", json={"email": "admin@example.com", "password": "secret"}).json()["access_token"]


def test_flush_db_removes_everything():
    client = TestClient(app)
    token = bootstrap_admin(client)
    client.post("/students", json={"id": "1", "first_name": "Maya", "last_name": "Lopez"}, headers=auth(token))
    client.post(
        "/interactions",
        json={"student_id": "1", "student_name": "Maya Lopez", "type": "coaching", "reason": "Check-in", "staff_member": "Coach"},
        headers=auth(token),
    )

    response = client.post("/admin/flush-db", headers=auth(token))
    assert response.status_code == 200
    assert response.json()["deleted"] == {"interactions": 1, "students": 1, "users": 1}

    db = SessionLocal()
    assert db.query(Student).count() == 0
    assert db.query(User).count() == 0
    db.close()

    # Registration reopens once no users remain
    assert client.post("/auth/register", json={"email": "new@example.com", "password": "secret"}).status_code == 201


def test_flush_db_requires_admin():
    client = TestClient(app)
    admin = bootstrap_admin(client)
    client.post(
        "/staff",
        json={"email": "coach@example.com", "first_name": "Coach", "last_name": "C", "password": "staffpass"},
        headers=auth(admin),
    )
    staff = client.post("/auth/login", json={"email": "coach@example.com", "password": "staffpass"}).json()["access_token"]
    assert client.post("/admin/flush-db", headers=auth(staff)).status_code == 403
    assert TestClient(app).post("/admin/flush-db").status_code == 401
