from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Sequence

from sqlalchemy.orm import Session

from eduassist.models.student import QuizResult
from eduassist.services import student_service
from eduassist.services.generation import generate


NO_HISTORY = "This student has not completed any quizzes yet."


def _taken_on(saved_at: datetime | None) -> str:
    return saved_at.strftime("%Y-%m-%d") if saved_at else "Date not available"


def format_quiz_history(results: Sequence[QuizResult]) -> str:
    if not results:
        return NO_HISTORY
    blocks = []
    for r in results:
        questions = (r.quiz_data or {}).get("questions") or []
        lines = [
            f"  {i}. Question: {q.get('question', '')}\n     Answer: {q.get('answer', '')}"
            for i, q in enumerate(questions, start=1)
            if isinstance(q, dict)
        ]
        blocks.append(f'Quiz on "{r.quiz_name}" (taken on {_taken_on(r.saved_at)}):\n' + "\n".join(lines))
    return "\n\n".join(blocks)


def evaluate_student_performance(db: Session, *, student_id: int, student_name: str) -> Dict[str, Any]:
    history = format_quiz_history(student_service.get_student_results(db, student_id))
    prompt = (
        "You are an expert educator and student performance analyst.\n"
        f"Write a comprehensive evaluation for a student named {student_name}. Analyze their quiz history "
        "to identify patterns, strengths and areas for improvement.\n\n"
        f"Here is the student's quiz history:\n---\n{history}\n---\n\n"
        "Include:\n"
        "1. **Overall Performance Summary**: one paragraph.\n"
        "2. **Identified Strengths**: a bulleted list of 2-3 topics or question types where the student excels.\n"
        "3. **Areas for Improvement**: a bulleted list of 2-3 concepts the student struggles with.\n"
        "4. **Actionable Recommendations**: a numbered list of 2-3 concrete next steps.\n"
        "Use Markdown headings (###), lists and bold text. Do NOT use markdown code blocks (```). "
        "Be encouraging and constructive."
    )
    res = generate(prompt)
    return {"evaluation_summary": res.text}
