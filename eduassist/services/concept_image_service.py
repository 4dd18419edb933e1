from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

from eduassist.schemas.teaching import StepDescriptions
from eduassist.services.generation import GenerationError, generate, generate_image


logger = logging.getLogger(__name__)

STEP_COUNT = 3


def _step_image_prompt(step: str, grade: str, subject: str) -> str:
    return (
        f"A simple, clear, and educational illustration for a {grade} student studying {subject}. "
        f'The image should visually represent this concept: "{step}". '
        "Style: vibrant, simple, and easy to understand for educational purposes."
    )


def describe_concept_steps(*, concept_description: str, grade: str, subject: str, language: str = "English") -> list[str]:
    prompt = (
        "You are an expert educator. Break down the following concept, topic or story into exactly "
        f"{STEP_COUNT} simple, easy-to-understand steps for a student, tailored to their grade and subject.\n"
        f"All step descriptions must be in the following language: {language}.\n\n"
        f"Topic/Story: {concept_description}\nGrade Level: {grade}\nSubject: {subject}\n\n"
        'Return "steps": a list of objects with a "step_description" each.'
    )
    res = generate(prompt, output_schema=StepDescriptions)
    steps = [s.step_description for s in res.output.steps if s.step_description.strip()][:STEP_COUNT]
    if not steps:
        raise GenerationError("Agent failed to generate step descriptions.")
    return steps


async def generate_concept_images(
    *,
    concept_description: str,
    grade: str,
    subject: str,
    language: str = "English",
) -> Dict[str, Any]:
    """Three illustrated steps explaining a concept; the step images are generated concurrently."""
    steps = await asyncio.to_thread(
        describe_concept_steps,
        concept_description=concept_description,
        grade=grade,
        subject=subject,
        language=language,
    )
    images = await asyncio.gather(
        *[asyncio.to_thread(generate_image, _step_image_prompt(s, grade, subject)) for s in steps]
    )
    missing = sum(1 for url in images if not url)
    if missing:
        logger.warning("concept images: %s of %s steps came back without an image", missing, len(steps))
    return {"steps": [{"step_description": s, "image_url": url or ""} for s, url in zip(steps, images)]}
