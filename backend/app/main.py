# Launchpad student tracker backend entrypoint.

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from backend.app.api import admin
from backend.app.api import ai
from backend.app.api import analytics
from backend.app.api import data
from backend.app.api import email
from backend.app.api import followups
from backend.app.api import interaction_types
from backend.app.api import interactions
from backend.app.api import login
from backend.app.api import password_reset
from backend.app.api import profile
from backend.app.api import register
from backend.app.api import settings as settings_api
from backend.app.api import staff
from backend.app.api import students
from backend.app.core.dev_seed import ensure_default_dev_data
from backend.app.core.logging_config import get_logger, setup_logging
from backend.app.core.settings import get_settings
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine

settings = get_settings()
setup_logging()
logger = get_logger(__name__)

app = FastAPI(title=settings.app_name, version=settings.api_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(register.router)
app.include_router(login.router)
app.include_router(password_reset.router)
app.include_router(profile.router)
app.include_router(staff.router)
app.include_router(students.router)
app.include_router(interactions.router)
app.include_router(interaction_types.router)
app.include_router(settings_api.router)
app.include_router(analytics.router)
app.include_router(data.router)
app.include_router(email.router)
app.include_router(ai.router)
app.include_router(followups.router)
app.include_router(admin.router)


@app.get("/")
def read_root():
    return {"app": settings.app_name, "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/health/db")
def health_check_db():
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Database health check failed: %s", exc)
        return JSONResponse(status_code=503, content={"status": "error", "db": False})
    finally:
        db.close()
    return {"status": "ok", "db": True}


@app.on_event("startup")
def init_database():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        ensure_default_dev_data(db)
    finally:
        db.close()
