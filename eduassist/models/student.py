from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from eduassist.db.base_class import Base, JSONType


DEFAULT_AVATAR = "https://placehold.co/100x100.png"


def default_alerts() -> dict:
    return {"missing_assignments": 0, "attendance_concern": False, "behavioral_note": False}


def default_submission_patterns() -> list[dict]:
    return [
        {"name": "On Time", "value": 0},
        {"name": "Late", "value": 0},
        {"name": "Missing", "value": 0},
    ]


class Student(Base):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    class_name: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    avatar: Mapped[str] = mapped_column(String(512), nullable=False, default=DEFAULT_AVATAR)
    trend: Mapped[str] = mapped_column(String(16), nullable=False, default="stable", server_default="stable")

    alerts: Mapped[dict] = mapped_column(JSONType, nullable=False, default=default_alerts)
    accommodations: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    last_positive_note: Mapped[str] = mapped_column(Text, nullable=False, default="Welcome!")

    # Historical observations (append-only lists rendered by the dashboard)
    assessment_history: Mapped[list[dict]] = mapped_column(JSONType, nullable=False, default=list)
    submission_patterns: Mapped[list[dict]] = mapped_column(JSONType, nullable=False, default=default_submission_patterns)
    behavioral_observations: Mapped[list[dict]] = mapped_column(JSONType, nullable=False, default=list)
    communication_history: Mapped[list[dict]] = mapped_column(JSONType, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class QuizResult(Base):
    __tablename__ = "quiz_results"

    id: Mapped[int] = mapped_column(primary_key=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("students.id"), index=True, nullable=False)
    quiz_name: Mapped[str] = mapped_column(String(255), nullable=False)
    quiz_data: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    # Only set when quiz_data carries the student's answers
    score_percent: Mapped[int | None] = mapped_column(Integer, nullable=True)
    saved_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
