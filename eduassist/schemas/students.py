from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Trend = Literal["up", "down", "stable"]
Status = Literal["On Track", "Needs Attention", "Excelling"]


class StudentCreate(BaseModel):
    name: str = Field(min_length=1)
    class_name: str = Field(min_length=1)
    accommodations: List[str] = Field(default_factory=list)
    last_positive_note: Optional[str] = None


class Alerts(BaseModel):
    missing_assignments: int = 0
    attendance_concern: bool = False
    behavioral_note: bool = False


class StudentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    class_name: str
    created_at: Optional[datetime] = None
    avatar: str
    trend: Trend = "stable"
    alerts: Alerts = Field(default_factory=Alerts)
    accommodations: List[str] = Field(default_factory=list)
    last_positive_note: str = ""
    assessment_history: List[Dict[str, Any]] = Field(default_factory=list)
    submission_patterns: List[Dict[str, Any]] = Field(default_factory=list)
    behavioral_observations: List[Dict[str, Any]] = Field(default_factory=list)
    communication_history: List[Dict[str, Any]] = Field(default_factory=list)

    # computed from quiz results
    quizzes_completed: int = 0
    average_score: int = 0
    status: Status = "Needs Attention"
    last_activity_date: str = "No activity yet"


class QuizResultCreate(BaseModel):
    quiz_name: str = Field(min_length=1)
    quiz_data: Dict[str, Any]


class QuizResultOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    quiz_name: str
    quiz_data: Dict[str, Any]
    score_percent: Optional[int] = None
    saved_at: Optional[datetime] = None


class StudentList(BaseModel):
    students: List[StudentOut]


class QuizResultList(BaseModel):
    results: List[QuizResultOut]
