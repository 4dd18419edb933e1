from __future__ import annotations

import logging
from typing import Any, Dict

from eduassist.schemas.story import ConceptVideoPlan
from eduassist.services.generation import generate, render_video


logger = logging.getLogger(__name__)

ART_STYLE = "Clean, vibrant, minimalist educational animation style. Use simple shapes and clear labels where appropriate."
MAX_SCENES = 5


def analyze_concept_for_video(*, concept: str, grade: str, subject: str, language: str = "English") -> Dict[str, Any]:
    prompt = (
        "You are an expert educator and instructional designer. Break the following concept down into a series "
        "of 3-5 simple, sequential video scenes that are easy for a student to understand.\n"
        "For each scene give a short descriptive title, a detailed video generation prompt and a concise "
        "explanation written in a narrative style suitable for a voice-over.\n"
        f"All titles, prompts and explanations must be in the following language: {language}.\n\n"
        f"Concept: {concept}\nGrade Level: {grade}\nSubject: {subject}\nArt Style: {ART_STYLE}\n\n"
        'Return "title" and "scenes" (scene_title, video_prompt, explanation).'
    )
    res = generate(prompt, output_schema=ConceptVideoPlan)
    plan = res.output
    plan.scenes = plan.scenes[:MAX_SCENES]
    return plan.model_dump()


def generate_concept_video_scene(*, video_prompt: str) -> Dict[str, Any]:
    """Start the video job, poll until it is done, download it."""
    logger.info("concept video: rendering scene")
    return {"video_url": render_video(video_prompt)}
