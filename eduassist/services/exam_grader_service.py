"""Handwritten exam grading: an OCR sub-agent followed by an evaluation sub-agent."""

from __future__ import annotations

import logging
from typing import Any, Dict

from eduassist.schemas.assessment import ExtractedPaper, PaperEvaluation
from eduassist.services.generation import GenerationError, MediaPart, generate


logger = logging.getLogger(__name__)


def analyze_exam_image(exam_image: str) -> ExtractedPaper:
    prompt = (
        "You are an expert OCR (Optical Character Recognition) system. Analyze the provided image of a "
        "student's exam paper. Identify the student's name and extract all the handwritten text from the answers. "
        "Prioritize accuracy.\n"
        'Return "student_name" and "extracted_text".'
    )
    try:
        res = generate(prompt, media=[MediaPart(url=exam_image)], output_schema=ExtractedPaper)
    except GenerationError as e:
        raise GenerationError("Image analysis failed to produce output.") from e
    logger.info("exam grader: extracted text for student %r", res.output.student_name)
    return res.output


def evaluate_paper(
    *,
    exam_topic: str,
    subject: str,
    total_marks: float,
    extracted_text: str,
    answer_key: str,
) -> PaperEvaluation:
    prompt = (
        f"You are an expert teacher and examiner for the subject: {subject}.\n"
        f'You are grading an exam on the topic: "{exam_topic}". The total marks possible are {total_marks}.\n'
        "You MUST use the following answer key as the absolute source of truth for grading.\n"
        f"--- ANSWER KEY ---\n{answer_key}\n--- END ANSWER KEY ---\n\n"
        "Below is the OCR-extracted text from a student's exam paper.\n"
        f"--- STUDENT'S ANSWERS ---\n{extracted_text}\n--- END STUDENT'S ANSWERS ---\n\n"
        "1. Compare the student's answers to the answer key. Award partial marks where appropriate.\n"
        f"2. Determine a fair score out of {total_marks} based ONLY on that comparison.\n"
        "3. Write constructive, personalized feedback: what the student did well, where they made mistakes "
        "(referencing the correct answers from the key) and specific suggestions for improvement.\n"
        'Return only "score" (a number) and "feedback".'
    )
    try:
        res = generate(prompt, output_schema=PaperEvaluation)
    except GenerationError as e:
        raise GenerationError("Evaluation failed to produce output.") from e
    return res.output


def grade_exam_paper(
    *,
    exam_topic: str,
    class_name: str,
    subject: str,
    total_marks: float,
    answer_key: str,
    exam_image: str,
) -> Dict[str, Any]:
    logger.info("exam grader: started (%s / %s / %s)", class_name, subject, exam_topic)
    paper = analyze_exam_image(exam_image)
    evaluation = evaluate_paper(
        exam_topic=exam_topic,
        subject=subject,
        total_marks=total_marks,
        extracted_text=paper.extracted_text,
        answer_key=answer_key,
    )
    score = max(0.0, min(float(total_marks), float(evaluation.score)))
    logger.info("exam grader: graded %r with score %s/%s", paper.student_name, score, total_marks)
    return {
        "student_name": paper.student_name,
        "score": score,
        "total_marks": float(total_marks),
        "feedback": evaluation.feedback,
    }
