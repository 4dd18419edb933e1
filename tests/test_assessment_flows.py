from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace
from typing import Any

import pytest

from eduassist.schemas.assessment import EvaluationReport, ExtractedPaper, PaperEvaluation
from eduassist.schemas.teaching import Quiz, QuizDraft, QuizQuestion
from eduassist.services import exam_grader_service, llm_service, quiz_service, student_evaluation_service
from eduassist.services.generation import GenerateResult, GenerationError


QUESTIONS = [
    {"question": "Capital of France?", "options": ["Paris", "Rome", "Berlin", "Madrid"], "answer": "Paris"},
    {"question": "2 + 2?", "options": ["3", "4", "5", "6"], "answer": "4"},
]


def test_generate_quiz_accepts_reply_with_extra_options(monkeypatch):
    reply = {
        "quiz": {
            "questions": [
                {"question": "Capital of France?", "options": ["Paris", "Rome", "Berlin", "Madrid", "Lyon"], "answer": "paris "},
            ]
        }
    }
    monkeypatch.setattr(llm_service, "chat_json", lambda **_kw: reply)

    out = quiz_service.generate_quiz(topic="Capitals", number_of_questions=1)

    assert out["questions"][0]["options"] == ["Paris", "Rome", "Berlin", "Madrid", "Lyon"]
    assert out["questions"][0]["answer"] == "paris "


def test_generate_quiz_returns_questions(monkeypatch):
    captured: dict[str, Any] = {}

    def _fake_generate(prompt, **kwargs):
        captured["prompt"] = prompt
        captured.update(kwargs)
        return GenerateResult(output=QuizDraft(quiz=Quiz(questions=[QuizQuestion(**q) for q in QUESTIONS])))

    monkeypatch.setattr(quiz_service, "generate", _fake_generate)

    out = quiz_service.generate_quiz(topic="General knowledge", number_of_questions=2, language="French")

    assert out == {"questions": QUESTIONS}
    assert "Number of Questions: 2" in captured["prompt"]
    assert "French" in captured["prompt"]
    assert captured["media"] == []


def test_evaluate_answers_marks_missing_answers(monkeypatch):
    captured: dict[str, Any] = {}

    def _fake_generate(prompt, **kwargs):
        captured["prompt"] = prompt
        return GenerateResult(output=EvaluationReport(report="### Score: 1/2"))

    monkeypatch.setattr(quiz_service, "generate", _fake_generate)

    out = quiz_service.evaluate_student_answers(quiz_questions=QUESTIONS, student_answers=["Paris"])

    assert out == {"report": "### Score: 1/2"}
    assert "Question 1: Capital of France?" in captured["prompt"]
    assert "Correct Answer: Paris\nStudent's Answer: Paris" in captured["prompt"]
    assert "Student's Answer: No answer" in captured["prompt"]


def test_score_quiz_data():
    assert quiz_service.score_quiz_data({"questions": QUESTIONS, "student_answers": ["Paris", "5"]}) == 50
    assert quiz_service.score_quiz_data({"questions": QUESTIONS}) is None
    assert quiz_service.score_quiz_data({"score_percent": 140}) == 100
    assert quiz_service.score_quiz_data({"score_percent": True, "questions": []}) is None


def _fake_exam_generate(score: float):
    def _generate(prompt, **kwargs):
        if kwargs["output_schema"] is ExtractedPaper:
            assert kwargs["media"][0].url == "data:image/jpeg;base64,EXAM"
            return GenerateResult(output=ExtractedPaper(student_name="Ravi", extracted_text="1. Paris"))
        assert "ANSWER KEY" in prompt and "1. Paris" in prompt
        return GenerateResult(output=PaperEvaluation(score=score, feedback="Well done"))

    return _generate


@pytest.mark.parametrize("raw,expected", [(8, 8.0), (14, 10.0), (-2, 0.0)])
def test_grade_exam_paper_clamps_score(monkeypatch, raw, expected):
    monkeypatch.setattr(exam_grader_service, "generate", _fake_exam_generate(raw))

    out = exam_grader_service.grade_exam_paper(
        exam_topic="Capitals",
        class_name="6A",
        subject="Geography",
        total_marks=10,
        answer_key="1. Paris",
        exam_image="data:image/jpeg;base64,EXAM",
    )

    assert out == {"student_name": "Ravi", "score": expected, "total_marks": 10.0, "feedback": "Well done"}


def test_grade_exam_paper_ocr_failure(monkeypatch):
    def _fail(prompt, **kwargs):
        raise GenerationError("The model returned no output.")

    monkeypatch.setattr(exam_grader_service, "generate", _fail)

    with pytest.raises(GenerationError, match="Image analysis failed to produce output."):
        exam_grader_service.grade_exam_paper(
            exam_topic="t", class_name="c", subject="s", total_marks=10, answer_key="k", exam_image="data:image/png;base64,A"
        )


def test_grade_exam_paper_evaluation_failure(monkeypatch):
    def _generate(prompt, **kwargs):
        if kwargs["output_schema"] is ExtractedPaper:
            return GenerateResult(output=ExtractedPaper(student_name="Ravi", extracted_text="..."))
        raise GenerationError("Model output did not match the expected schema.")

    monkeypatch.setattr(exam_grader_service, "generate", _generate)

    with pytest.raises(GenerationError, match="Evaluation failed to produce output."):
        exam_grader_service.grade_exam_paper(
            exam_topic="t", class_name="c", subject="s", total_marks=10, answer_key="k", exam_image="data:image/png;base64,A"
        )


def test_format_quiz_history():
    results = [
        SimpleNamespace(quiz_name="Capitals", quiz_data={"questions": QUESTIONS}, saved_at=datetime(2024, 2, 3, 10, 0)),
        SimpleNamespace(quiz_name="Empty", quiz_data={}, saved_at=None),
    ]

    text = student_evaluation_service.format_quiz_history(results)

    assert 'Quiz on "Capitals" (taken on 2024-02-03):' in text
    assert "1. Question: Capital of France?\n     Answer: Paris" in text
    assert 'Quiz on "Empty" (taken on Date not available):' in text
    assert student_evaluation_service.format_quiz_history([]) == student_evaluation_service.NO_HISTORY


def test_evaluate_student_performance(monkeypatch):
    captured: dict[str, Any] = {}

    def _fake_generate(prompt, **kwargs):
        captured["prompt"] = prompt
        return GenerateResult(text="### Overall Performance Summary\nSteady progress.")

    monkeypatch.setattr(student_evaluation_service.student_service, "get_student_results", lambda db, sid: [])
    monkeypatch.setattr(student_evaluation_service, "generate", _fake_generate)

    out = student_evaluation_service.evaluate_student_performance(object(), student_id=3, student_name="Asha")

    assert out == {"evaluation_summary": "### Overall Performance Summary\nSteady progress."}
    assert "Asha" in captured["prompt"]
    assert student_evaluation_service.NO_HISTORY in captured["prompt"]
