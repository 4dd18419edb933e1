from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from eduassist.db.session import get_db
from eduassist.schemas.assessment import StudentEvaluationOutput, StudentEvaluationRequest
from eduassist.schemas.common import CreatedOut, Envelope
from eduassist.schemas.students import QuizResultCreate, QuizResultList, StudentCreate, StudentList
from eduassist.services import student_service
from eduassist.services.student_evaluation_service import evaluate_student_performance

router = APIRouter(tags=["students"])


def _require_student(db: Session, student_id: int):
    student = student_service.get_student(db, student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return student


@router.get("/students", response_model=Envelope[StudentList])
def students_list(request: Request, db: Session = Depends(get_db)):
    data = student_service.list_students(db)
    return {"request_id": request.state.request_id, "data": {"students": data}, "error": None}


@router.post("/students", response_model=Envelope[CreatedOut])
def students_create(request: Request, payload: StudentCreate, db: Session = Depends(get_db)):
    sid = student_service.add_student(db, **payload.model_dump())
    return {"request_id": request.state.request_id, "data": {"id": sid}, "error": None}


@router.get("/students/{student_id}/quiz-results", response_model=Envelope[QuizResultList])
def quiz_results_list(request: Request, student_id: int, db: Session = Depends(get_db)):
    rows = student_service.get_student_results(db, student_id)
    data = [student_service.quiz_result_to_dict(r) for r in rows]
    return {"request_id": request.state.request_id, "data": {"results": data}, "error": None}


@router.post("/students/{student_id}/quiz-results", response_model=Envelope[CreatedOut])
def quiz_results_create(request: Request, student_id: int, payload: QuizResultCreate, db: Session = Depends(get_db)):
    _require_student(db, student_id)
    rid = student_service.save_quiz_result(db, student_id=student_id, quiz_name=payload.quiz_name, quiz_data=payload.quiz_data)
    return {"request_id": request.state.request_id, "data": {"id": rid}, "error": None}


@router.post("/students/{student_id}/evaluation", response_model=Envelope[StudentEvaluationOutput])
def student_evaluation(request: Request, student_id: int, payload: StudentEvaluationRequest, db: Session = Depends(get_db)):
    data = evaluate_student_performance(db, student_id=student_id, student_name=payload.student_name)
    return {"request_id": request.state.request_id, "data": data, "error": None}
