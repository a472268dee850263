from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from backend.app.core.time import utc_now
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.user import User
from backend.app.services.email import get_mailer


class FakeMailer:
    def __init__(self):
        self.sent = []

    async def send(self, to, subject, text, html=None, *, from_address=None, reply_to=None, bcc=None):
        self.sent.append({"to": to, "subject": subject, "text": text})
        return "<fake@test>"


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mailer():
    fake = FakeMailer()
    app.dependency_overrides[get_mailer] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_mailer, None)


def register_user(client: TestClient, email: str, password: str):
    return client.post("/auth/register", json={"email": email, "password": password})


def login(client: TestClient, email: str, password: str):
    return client.post("/auth/login", json={"email": email, "password": password})


def test_first_registration_creates_admin():
    client = TestClient(app)
    response = register_user(client, "Admin@Example.com", "secret")
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "admin@example.com"
    assert data["is_admin"] is True
    assert data["permissions"] == ["read", "write", "admin"]


def test_registration_closed_once_a_user_exists():
    client = TestClient(app)
    register_user(client, "admin@example.com", "secret")
    response = register_user(client, "second@example.com", "secret")
    assert response.status_code == 403


def test_login_returns_token_user_and_cookie():
    client = TestClient(app)
    register_user(client, "login@example.com", "secret")
    response = login(client, "login@example.com", "secret")
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["access_token"]
    assert data["user"]["email"] == "login@example.com"
    assert data["user"]["last_login"] is not None
    assert response.cookies.get("auth-token") == data["access_token"]


def test_cookie_authenticates_follow_up_requests():
    client = TestClient(app)
    register_user(client, "cookie@example.com", "secret")
    login(client, "cookie@example.com", "secret")

    response = client.get("/auth/me")
    assert response.status_code == 200
    assert response.json()["email"] == "cookie@example.com"

    session = client.get("/auth/session").json()
    assert session["authenticated"] is True
    assert session["user"]["email"] == "cookie@example.com"


def test_session_without_credentials_is_not_an_error():
    client = TestClient(app)
    response = client.get("/auth/session")
    assert response.status_code == 200
    assert response.json() == {"authenticated": False, "user": None}


def test_logout_clears_cookie():
    client = TestClient(app)
    response = client.post("/auth/logout")
    assert response.status_code == 200
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith("auth-token=")
    assert "Max-Age=0" in set_cookie


def test_bad_credentials_return_400():
    client = TestClient(app)
    register_user(client, "wrongpw@example.com", "secret")
    assert login(client, "wrongpw@example.com", "bad").status_code == 400
    assert login(client, "nosuch@example.com", "secret").status_code == 400


def test_missing_hash_returns_400_not_500():
    client = TestClient(app)
    register_user(client, "badhash@example.com", "secret")
    db = SessionLocal()
    user = db.query(User).filter(User.email == "badhash@example.com").first()
    user.hashed_password = None
    db.commit()
    db.close()
    assert login(client, "badhash@example.com", "secret").status_code == 400


def test_me_requires_valid_token():
    client = TestClient(app)
    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Bearer invalid"}).status_code == 401


def test_forgot_and_reset_password(mailer):
    client = TestClient(app)
    register_user(client, "forgot@example.com", "secret")

    response = client.post("/auth/forgot-password", json={"email": "forgot@example.com"})
    assert response.status_code == 200
    assert len(mailer.sent) == 1

    db = SessionLocal()
    token = db.query(User).filter(User.email == "forgot@example.com").first().reset_token
    db.close()
    assert token in mailer.sent[0]["text"]

    response = client.post("/auth/reset-password", json={"token": token, "new_password": "new-password-1"})
    assert response.status_code == 200
    assert login(client, "forgot@example.com", "new-password-1").status_code == 200

    # Tokens are single use
    response = client.post("/auth/reset-password", json={"token": token, "new_password": "another-pass"})
    assert response.status_code == 400


def test_forgot_password_does_not_reveal_unknown_emails(mailer):
    client = TestClient(app)
    register_user(client, "known@example.com", "secret")
    known = client.post("/auth/forgot-password", json={"email": "known@example.com"}).json()
    unknown = client.post("/auth/forgot-password", json={"email": "unknown@example.com"}).json()
    assert known == unknown
    assert [message["to"] for message in mailer.sent] == ["known@example.com"]


def test_expired_reset_token_is_rejected():
    client = TestClient(app)
    register_user(client, "expired@example.com", "secret")
    db = SessionLocal()
    user = db.query(User).filter(User.email == "expired@example.com").first()
    user.reset_token = "expired-token"
    user.reset_token_expires_at = utc_now() - timedelta(minutes=1)
    db.commit()
    db.close()

    response = client.post("/auth/reset-password", json={"token": "expired-token", "new_password": "new-password-1"})
    assert response.status_code == 400
