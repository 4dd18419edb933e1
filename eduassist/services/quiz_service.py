from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

from eduassist.schemas.assessment import EvaluationReport
from eduassist.schemas.teaching import QuizDraft, QuizQuestion
from eduassist.services.generation import MediaPart, generate


def generate_quiz(
    *,
    topic: str,
    grade_level: Optional[str] = None,
    number_of_questions: int = 5,
    language: str = "English",
    image: Optional[str] = None,
) -> Dict[str, Any]:
    """Multiple-choice quiz. Four options per question is asked for in the prompt, not enforced."""
    prompt = (
        "You are an AI quiz generator designed to create quizzes for teachers.\n"
        "Based on the topic, grade level and image (if provided), generate a quiz with the specified number of questions.\n"
        f"The quiz questions, options and answers MUST be in the following language: {language}.\n"
        'Return a JSON object {"quiz": {"questions": [...]}}. Each question has "question" (string), '
        '"options" (array of exactly four strings) and "answer" (a string that is exactly one of the options).\n\n'
        f"Topic: {topic}\n"
        f"Grade Level: {grade_level or 'Not specified'}\n"
        f"Number of Questions: {int(number_of_questions)}"
    )
    media = [MediaPart(url=image)] if image else []
    res = generate(prompt, media=media, output_schema=QuizDraft)
    return res.output.quiz.model_dump()


def _format_answers(questions: Sequence[QuizQuestion], answers: Sequence[str]) -> str:
    blocks: List[str] = []
    for i, q in enumerate(questions):
        given = answers[i] if i < len(answers) and answers[i] else "No answer"
        blocks.append(
            f"Question {i + 1}: {q.question}\n"
            f"Options: {', '.join(q.options)}\n"
            f"Correct Answer: {q.answer}\n"
            f"Student's Answer: {given}"
        )
    return "\n\n".join(blocks)


def evaluate_student_answers(*, quiz_questions: Sequence[Any], student_answers: Sequence[str]) -> Dict[str, Any]:
    """Markdown report on a single quiz attempt. Answers line up with questions by position."""
    questions = [q if isinstance(q, QuizQuestion) else QuizQuestion.model_validate(q) for q in quiz_questions]
    prompt = (
        "You are an expert teacher evaluating a student's quiz. For each question compare the student's "
        "answer with the correct answer, then write a report with: the overall score, a short review of "
        "each question, the student's strengths, areas for improvement and two or three study tips.\n"
        "Use Markdown headings, lists and bold text. Do NOT use markdown code blocks (```).\n\n"
        + _format_answers(questions, list(student_answers))
    )
    res = generate(prompt, output_schema=EvaluationReport)
    return res.output.model_dump()


def score_quiz_data(quiz_data: Dict[str, Any]) -> Optional[int]:
    """Percent of correct answers when ``quiz_data`` carries the student's answers, else None."""
    explicit = quiz_data.get("score_percent")
    if isinstance(explicit, (int, float)) and not isinstance(explicit, bool):
        return int(round(max(0.0, min(100.0, float(explicit)))))

    questions = quiz_data.get("questions") or []
    answers = quiz_data.get("student_answers")
    if not isinstance(answers, list) or not isinstance(questions, list) or not questions:
        return None
    correct = 0
    for i, q in enumerate(questions):
        if not isinstance(q, dict):
            continue
        if i < len(answers) and str(answers[i]).strip() == str(q.get("answer", "")).strip():
            correct += 1
    return int(round(100.0 * correct / len(questions)))


def quiz_as_text(quiz: Dict[str, Any]) -> str:
    return json.dumps(quiz, ensure_ascii=False, indent=2)
