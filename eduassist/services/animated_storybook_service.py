"""Animated storybook: story analysis, character sheet, concept visuals and narrated scenes.

The browser drives the steps one request at a time (analyze, then character
sheet, then one scene per request) so no single request has to cover the
whole story's video generation.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from eduassist.schemas.story import StoryAnalysis
from eduassist.services.generation import GenerationError, generate, generate_image, generate_speech, render_video


logger = logging.getLogger(__name__)

ART_STYLE = (
    "Charming children's storybook illustration, soft watercolor style, vibrant but gentle colors, "
    "rounded shapes, no sharp edges."
)
MAX_KEY_CONCEPTS = 3


def analyze_story(*, story: str, grade: str) -> Dict[str, Any]:
    prompt = (
        "You are a master storyteller, educator and film director. Analyze the following story and break it "
        f"down into distinct scenes. Also identify up to {MAX_KEY_CONCEPTS} key educational concepts or vocabulary words.\n\n"
        "For each scene define the characters, setting and mood, and write a detailed illustration prompt. "
        "Keep characters consistent: first write a character sheet prompt for the main character and reference "
        "it in every scene's illustration prompt. Extract the exact narration text for each scene, including dialogue.\n"
        "For each key concept give a simple, grade-appropriate explanation and a prompt for a helpful visual aid.\n\n"
        f"Grade: {grade}\nArt Style: {ART_STYLE}\n\nStory:\n{story}\n\n"
        'Return "title", "main_character", "character_sheet_prompt", "scenes" (scene_description, characters, '
        'setting, mood, narration_text, illustration_prompt) and "key_concepts" (concept, explanation, visual_prompt).'
    )
    res = generate(prompt, output_schema=StoryAnalysis)
    analysis = res.output
    analysis.key_concepts = analysis.key_concepts[:MAX_KEY_CONCEPTS]
    return analysis.model_dump()


def generate_character_sheet(*, prompt: str) -> Dict[str, Any]:
    url = generate_image(prompt)
    if not url:
        raise GenerationError("Failed to generate character sheet.")
    return {"character_sheet_data_uri": url}


def generate_concept_image(*, prompt: str) -> Dict[str, Any]:
    url = generate_image(prompt)
    if not url:
        raise GenerationError("Image generation returned no media.")
    return {"image_url": url}


def scene_video_prompt(illustration_prompt: str) -> str:
    return f"Animate this scene in a gentle, slow-panning Ken Burns style. Scene description: {illustration_prompt}"


async def generate_scene(
    *,
    narration_text: str,
    illustration_prompt: str,
    character_sheet_data_uri: Optional[str] = None,
) -> Dict[str, Any]:
    """Narration audio and scene video, produced concurrently."""
    reference = character_sheet_data_uri if (character_sheet_data_uri or "").startswith("data:") else None
    audio, video = await asyncio.gather(
        asyncio.to_thread(generate_speech, narration_text),
        asyncio.to_thread(render_video, scene_video_prompt(illustration_prompt), reference=reference),
    )
    return {"narration_audio": audio, "video_url": video}
