from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from eduassist.db.session import get_db
from eduassist.schemas.assessment import (
    EvaluateAnswersRequest,
    EvaluationReport,
    ExamGradeOutput,
    ExamGradeRequest,
    GradingResultIn,
)
from eduassist.schemas.common import CreatedOut, Envelope
from eduassist.schemas.teaching import Quiz, QuizGenerateRequest
from eduassist.services import student_service
from eduassist.services.exam_grader_service import grade_exam_paper
from eduassist.services.quiz_service import evaluate_student_answers, generate_quiz

router = APIRouter(tags=["assessment"])


@router.post("/quiz/generate", response_model=Envelope[Quiz])
def quiz_generate(request: Request, payload: QuizGenerateRequest):
    data = generate_quiz(**payload.model_dump())
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/quiz/evaluate", response_model=Envelope[EvaluationReport])
def quiz_evaluate(request: Request, payload: EvaluateAnswersRequest):
    data = evaluate_student_answers(quiz_questions=payload.quiz_questions, student_answers=payload.student_answers)
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/exams/grade", response_model=Envelope[ExamGradeOutput])
def exams_grade(request: Request, payload: ExamGradeRequest, db: Session = Depends(get_db)):
    data = grade_exam_paper(**payload.model_dump(exclude={"save_result"}))
    if payload.save_result:
        data["grading_result_id"] = student_service.save_grading_result(
            db,
            {
                **data,
                "class_name": payload.class_name,
                "subject": payload.subject,
                "exam_topic": payload.exam_topic,
            },
        )
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/grading-results", response_model=Envelope[CreatedOut])
def grading_results_create(request: Request, payload: GradingResultIn, db: Session = Depends(get_db)):
    rid = student_service.save_grading_result(db, payload.model_dump())
    return {"request_id": request.state.request_id, "data": {"id": rid}, "error": None}
