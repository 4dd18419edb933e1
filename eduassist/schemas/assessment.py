from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from eduassist.schemas.teaching import QuizQuestion


class EvaluateAnswersRequest(BaseModel):
    quiz_questions: List[QuizQuestion] = Field(min_length=1)
    student_answers: List[str] = Field(default_factory=list)


class EvaluationReport(BaseModel):
    report: str


class StudentEvaluationRequest(BaseModel):
    student_name: str = Field(min_length=1)


class StudentEvaluationOutput(BaseModel):
    evaluation_summary: str


class ExamGradeRequest(BaseModel):
    exam_topic: str
    class_name: str
    subject: str
    total_marks: float = Field(gt=0)
    answer_key: str = Field(min_length=1)
    exam_image: str = Field(min_length=1)
    save_result: bool = False


class ExtractedPaper(BaseModel):
    student_name: str
    extracted_text: str


class PaperEvaluation(BaseModel):
    score: float
    feedback: str


class ExamGradeOutput(BaseModel):
    student_name: str
    score: float
    total_marks: float
    feedback: str
    grading_result_id: Optional[int] = None


class GradingResultIn(BaseModel):
    student_name: str
    class_name: str
    subject: str
    exam_topic: str
    score: float
    total_marks: float
    feedback: str = ""
