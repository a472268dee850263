"""Interaction model: one logged contact between staff and a student."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


class Interaction(Base):
    __tablename__ = "interactions"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(String(64), ForeignKey("students.id"), nullable=False, index=True)
    staff_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    student_first_name = Column(String(100), nullable=False)
    student_last_name = Column(String(100), nullable=False, default="")
    program = Column(String(50), nullable=False, default="default")
    type = Column(String(50), nullable=False)
    reason = Column(String, nullable=False)
    notes = Column(Text, nullable=False, default="")
    date = Column(String(32), nullable=False)
    time = Column(String(32), nullable=False)
    staff_member = Column(String, nullable=False)
    status = Column(String(32), nullable=False, default="completed")
    ai_summary = Column(Text, nullable=True)

    follow_up_required = Column(Boolean, nullable=False, default=False)
    # Calendar date, YYYY-MM-DD
    follow_up_date = Column(String(32), nullable=True, index=True)
    follow_up_sent = Column(Boolean, nullable=False, default=False)
    follow_up_student = Column(Boolean, nullable=False, default=False)
    follow_up_student_email = Column(String, nullable=True)
    follow_up_staff = Column(Boolean, nullable=False, default=False)
    follow_up_staff_email = Column(String, nullable=True)

    is_archived = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utc_now, index=True)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    student = relationship("Student", back_populates="interactions", foreign_keys=[student_id])
    staff = relationship("User", back_populates="interactions", foreign_keys=[staff_id])

    @property
    def student_name(self) -> str:
        return f"{self.student_first_name} {self.student_last_name}".strip()
