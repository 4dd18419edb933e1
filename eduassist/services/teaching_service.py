from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from eduassist.schemas.teaching import ExplainerOutput, WeeklyPlanOutput, WorksheetsOutput
from eduassist.services.generation import GenerationError, MediaPart, generate


logger = logging.getLogger(__name__)

NO_CODE_BLOCKS = "Format the output as a clean, readable document with Markdown headings, lists and bold text. Do NOT use markdown code blocks (```)."


def _media(image: Optional[str]) -> list[MediaPart]:
    return [MediaPart(url=image)] if image else []


def explain_teaching_methods(
    *,
    content: str,
    grade: str,
    subject: str,
    language: str = "English",
    image: Optional[str] = None,
) -> Dict[str, Any]:
    prompt = (
        "You are an experienced teacher. Given the lesson content, class grade and subject, "
        "suggest a list of simplified and effective teaching methods.\n"
        "Analyze both the text and the image (if provided) to create your suggestions.\n"
        f"The entire response must be in the following language: {language}.\n"
        f"{NO_CODE_BLOCKS}\n\n"
        f"Lesson Content: {content}\n"
        f"Class Grade: {grade}\n"
        f"Subject: {subject}\n\n"
        'Return the Markdown document in the "teaching_methods" field.'
    )
    res = generate(prompt, media=_media(image), output_schema=ExplainerOutput)
    return res.output.model_dump()


def generate_weekly_plan(
    *,
    teacher_name: str,
    teacher_email: str,
    teacher_availability: str,
    subject: str,
    class_name: str,
    teaching_goals: str,
    constraints: str = "",
    language: str = "English",
) -> Dict[str, Any]:
    """Plan one teaching week (Monday to Friday).

    ``readable_plan`` is Markdown for the teacher; ``json_plan`` is the same
    plan in a machine-readable form for calendar tooling.
    """
    prompt = (
        "You are an expert instructional planner. Build a weekly teaching plan (Monday to Friday) "
        "that fits the teacher's availability and constraints and works towards the teaching goals.\n"
        f"Everything must be written in the following language: {language}.\n\n"
        f"Teacher: {teacher_name} <{teacher_email}>\n"
        f"Availability: {teacher_availability}\n"
        f"Subject: {subject}\n"
        f"Class: {class_name}\n"
        f"Teaching goals: {teaching_goals}\n"
        f"Constraints: {constraints or 'None'}\n\n"
        'Return "readable_plan" as a Markdown document (no code blocks) and "json_plan" with '
        "teacher_name, teacher_email, subject, class_name and week: a list of days, each with "
        "day, topic, activities (list of strings) and assignments."
    )
    res = generate(prompt, output_schema=WeeklyPlanOutput)
    return res.output.model_dump()


def generate_worksheets(
    *,
    grade: str,
    subject: str,
    image: str,
    worksheet_count: int = 1,
    language: str = "English",
) -> Dict[str, Any]:
    prompt = (
        "You are an expert teacher who designs printable worksheets. Look at the attached image "
        f"(a textbook page, diagram or photo) and create {worksheet_count} distinct worksheet(s) based on it.\n"
        "Vary the worksheet types (e.g. fill in the blanks, matching, short answer, multiple choice).\n"
        f"Grade: {grade}\nSubject: {subject}\n"
        f"All worksheets must be in the following language: {language}.\n\n"
        'Return "worksheets": a list of objects with "title", "type" and "content" '
        "(the full worksheet as Markdown, no code blocks)."
    )
    res = generate(prompt, media=_media(image), output_schema=WorksheetsOutput)
    worksheets = res.output.worksheets[: max(1, int(worksheet_count))]
    if not worksheets:
        raise GenerationError("The AI failed to generate any worksheets. Please try a different image or prompt.")
    return {"worksheets": [w.model_dump() for w in worksheets]}
