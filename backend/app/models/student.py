"""Student model."""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


class Student(Base):
    __tablename__ = "students"

    # Program-issued student number, not a surrogate key
    id = Column(String(64), primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String, nullable=True)
    program = Column(String(50), nullable=False, default="default")
    cohort = Column(Integer, nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    interactions = relationship(
        "Interaction",
        back_populates="student",
        cascade="all, delete-orphan",
        foreign_keys="Interaction.student_id",
    )
