import os

from sqlalchemy.orm import Session

from backend.app.core.logging_config import get_logger
from backend.app.core.security import get_password_hash
from backend.app.core.settings import get_settings
from backend.app.models.student import Student
from backend.app.models.user import User
from backend.app.services.system_settings import get_or_create_system_settings

logger = get_logger(__name__)

DEFAULT_DEV_PASSWORD = "Secret123!"
DEFAULT_DEV_ADMIN = {
    "email": "admin@launchpad.test",
    "first_name": "Launchpad",
    "last_name": "Admin",
    "role": "Program Director",
}
DEFAULT_DEV_STUDENTS = [
    {"id": "LP-1001", "first_name": "Ada", "last_name": "Lovelace", "cohort": 1},
    {"id": "LP-1002", "first_name": "Grace", "last_name": "Hopper", "cohort": 1},
    {"id": "LP-2001", "first_name": "Alan", "last_name": "Turing", "cohort": 2},
]


def ensure_default_dev_data(db: Session) -> None:
    """
    Seed an admin account, a few students and the settings row for local development.
    Skips execution outside development and when running under pytest.
    """
    if os.getenv("PYTEST_CURRENT_TEST") or get_settings().environment != "development":
        return

    get_or_create_system_settings(db)

    created = False
    if not db.query(User).filter(User.email == DEFAULT_DEV_ADMIN["email"]).first():
        db.add(
            User(
                **DEFAULT_DEV_ADMIN,
                hashed_password=get_password_hash(DEFAULT_DEV_PASSWORD),
                is_active=True,
                is_admin=True,
            )
        )
        created = True

    for student in DEFAULT_DEV_STUDENTS:
        if db.query(Student).filter(Student.id == student["id"]).first():
            continue
        db.add(Student(**student))
        created = True

    if created:
        db.commit()
        logger.info("Seeded development admin %s and sample students", DEFAULT_DEV_ADMIN["email"])
