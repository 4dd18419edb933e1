from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from eduassist.services.concept_image_service import generate_concept_images
from eduassist.services.generation import MediaPart, generate
from eduassist.services.quiz_service import generate_quiz, quiz_as_text
from eduassist.services.teaching_service import NO_CODE_BLOCKS, explain_teaching_methods


logger = logging.getLogger(__name__)

LESSON_QUIZ_QUESTIONS = 3


async def create_lesson_plan(
    *,
    topic: str,
    grade: str,
    subject: str,
    language: str = "English",
    image: Optional[str] = None,
) -> Dict[str, Any]:
    """Coordinator: teaching methods, a short quiz and concept images in parallel, then one synthesis call."""
    logger.info("lesson plan: delegating sub-agents for topic=%r", topic)
    methods, quiz, concept = await asyncio.gather(
        asyncio.to_thread(
            explain_teaching_methods,
            content=topic,
            grade=grade,
            subject=subject,
            language=language,
            image=image,
        ),
        asyncio.to_thread(
            generate_quiz,
            topic=topic,
            grade_level=grade,
            number_of_questions=LESSON_QUIZ_QUESTIONS,
            language=language,
            image=image,
        ),
        generate_concept_images(concept_description=topic, grade=grade, subject=subject, language=language),
    )
    steps = concept.get("steps") or []
    image_url = (steps[0].get("image_url") if steps else "") or ""

    logger.info("lesson plan: synthesizing results")
    prompt = (
        "You are a master educator responsible for creating a final, comprehensive lesson plan.\n"
        "Synthesize the material from your assistant agents into one cohesive, well-structured lesson plan.\n"
        f"The entire lesson plan must be in the following language: {language}.\n"
        "If an image was provided, build activities or discussion points around it.\n\n"
        f"Topic: {topic}\nGrade Level: {grade}\nSubject: {subject}\n\n"
        f"1. Suggested Teaching Methods & Activities:\n{methods['teaching_methods']}\n\n"
        f"2. Assessment Quiz (JSON):\n{quiz_as_text(quiz)}\n\n"
        "Include: a clear title, learning objectives, a list of materials (mention the generated "
        "illustration and the provided image if any), a step-by-step procedure, the quiz rewritten as "
        "a readable list with the correct answers marked, and a concluding summary.\n"
        f"{NO_CODE_BLOCKS}"
    )
    media = [MediaPart(url=image)] if image else []
    res = await asyncio.to_thread(generate, prompt, media=media)
    return {"lesson_plan": res.text, "image_url": image_url}
