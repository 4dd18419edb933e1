from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eduassist.models.grading_result import GradingResult
from eduassist.models.student import QuizResult, Student
from eduassist.services.quiz_service import score_quiz_data


logger = logging.getLogger(__name__)

NEEDS_ATTENTION_BELOW = 70
EXCELLING_FROM = 90


class StoreError(RuntimeError):
    """Persistence failed. The message is static and safe to show to users."""


def compute_metrics(results: Iterable[QuizResult]) -> Dict[str, Any]:
    rows = list(results)
    if not rows:
        return {
            "quizzes_completed": 0,
            "average_score": 0,
            "status": "Needs Attention",
            "last_activity_date": "No activity yet",
        }

    scores = [int(r.score_percent) for r in rows if r.score_percent is not None]
    average = int(round(sum(scores) / len(scores))) if scores else 0
    if average < NEEDS_ATTENTION_BELOW:
        status = "Needs Attention"
    elif average >= EXCELLING_FROM:
        status = "Excelling"
    else:
        status = "On Track"

    dates = [r.saved_at for r in rows if r.saved_at is not None]
    last = max(dates).date().isoformat() if dates else "No activity yet"
    return {
        "quizzes_completed": len(rows),
        "average_score": average,
        "status": status,
        "last_activity_date": last,
    }


def student_to_dict(s: Student, results: Iterable[QuizResult] = ()) -> Dict[str, Any]:
    out = {
        "id": int(s.id),
        "name": s.name,
        "class_name": s.class_name,
        "created_at": s.created_at,
        "avatar": s.avatar,
        "trend": s.trend or "stable",
        "alerts": s.alerts or {},
        "accommodations": list(s.accommodations or []),
        "last_positive_note": s.last_positive_note or "",
        "assessment_history": list(s.assessment_history or []),
        "submission_patterns": list(s.submission_patterns or []),
        "behavioral_observations": list(s.behavioral_observations or []),
        "communication_history": list(s.communication_history or []),
    }
    out.update(compute_metrics(results))
    return out


def add_student(
    db: Session,
    *,
    name: str,
    class_name: str,
    accommodations: Optional[List[str]] = None,
    last_positive_note: Optional[str] = None,
) -> int:
    student = Student(
        name=name,
        class_name=class_name,
        accommodations=list(accommodations or []),
        last_positive_note=last_positive_note or "Welcome!",
    )
    try:
        db.add(student)
        db.commit()
        db.refresh(student)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("add_student failed")
        raise StoreError("Could not add student to database.") from e
    return int(student.id)


def list_students(db: Session) -> List[Dict[str, Any]]:
    try:
        students = db.query(Student).order_by(Student.id.asc()).all()
        ids = [int(s.id) for s in students]
        results = db.query(QuizResult).filter(QuizResult.student_id.in_(ids)).all() if ids else []
    except SQLAlchemyError as e:
        logger.exception("list_students failed")
        raise StoreError("Could not retrieve students from database.") from e

    by_student: Dict[int, List[QuizResult]] = defaultdict(list)
    for r in results:
        by_student[int(r.student_id)].append(r)
    return [student_to_dict(s, by_student.get(int(s.id), [])) for s in students]


def save_quiz_result(db: Session, *, student_id: int, quiz_name: str, quiz_data: Dict[str, Any]) -> int:
    row = QuizResult(
        student_id=int(student_id),
        quiz_name=quiz_name,
        quiz_data=quiz_data,
        score_percent=score_quiz_data(quiz_data),
    )
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("save_quiz_result failed (student_id=%s)", student_id)
        raise StoreError("Could not save quiz result.") from e
    return int(row.id)


def get_student_results(db: Session, student_id: int) -> List[QuizResult]:
    try:
        return (
            db.query(QuizResult)
            .filter(QuizResult.student_id == int(student_id))
            .order_by(QuizResult.saved_at.asc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.exception("get_student_results failed (student_id=%s)", student_id)
        raise StoreError("Could not retrieve student results.") from e


def get_student(db: Session, student_id: int) -> Optional[Student]:
    try:
        return db.query(Student).filter(Student.id == int(student_id)).first()
    except SQLAlchemyError as e:
        logger.exception("get_student failed (student_id=%s)", student_id)
        raise StoreError("Could not retrieve students from database.") from e


def save_grading_result(db: Session, result: Dict[str, Any]) -> int:
    row = GradingResult(
        student_name=result["student_name"],
        class_name=result["class_name"],
        subject=result["subject"],
        exam_topic=result["exam_topic"],
        score=float(result["score"]),
        total_marks=float(result["total_marks"]),
        feedback=result.get("feedback") or "",
    )
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("save_grading_result failed")
        raise StoreError("Could not save grading result.") from e
    return int(row.id)


def quiz_result_to_dict(r: QuizResult) -> Dict[str, Any]:
    return {
        "id": int(r.id),
        "student_id": int(r.student_id),
        "quiz_name": r.quiz_name,
        "quiz_data": r.quiz_data or {},
        "score_percent": r.score_percent,
        "saved_at": r.saved_at.isoformat() if r.saved_at else None,
    }
