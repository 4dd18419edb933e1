from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

from eduassist.schemas.story import StoryDraft
from eduassist.services.generation import GenerationError, generate, generate_image


logger = logging.getLogger(__name__)


def draft_story(*, topic: str, grade: str, language: str = "English") -> StoryDraft:
    prompt = (
        "You are an expert storyteller and educator. Create a short, engaging and educational storybook "
        "for a student. The story should be between 5 and 7 pages long.\n"
        f"Tailor it to the student's grade level and write it entirely in the following language: {language}.\n\n"
        f"Topic: {topic}\nGrade Level: {grade}\n\n"
        'Return "title" and "pages": for each page the story "text" and an "illustration_prompt" '
        "describing a vibrant, simple and educational illustration that matches the text. "
        "The illustration prompt does not need to be in the target language."
    )
    res = generate(prompt, output_schema=StoryDraft)
    draft = res.output
    if not draft.pages:
        raise GenerationError("Agent failed to generate story content.")
    return draft


async def generate_storybook(*, topic: str, grade: str, language: str = "English") -> Dict[str, Any]:
    draft = await asyncio.to_thread(draft_story, topic=topic, grade=grade, language=language)
    logger.info("storybook %r: illustrating %s pages", draft.title, len(draft.pages))
    images = await asyncio.gather(
        *[asyncio.to_thread(generate_image, page.illustration_prompt) for page in draft.pages]
    )
    return {
        "title": draft.title,
        "pages": [{"text": page.text, "image_url": url or ""} for page, url in zip(draft.pages, images)],
    }
