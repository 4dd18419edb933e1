from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from eduassist.services.animated_storybook_service import generate_scene
from eduassist.services.concept_video_service import generate_concept_video_scene


def task_generate_scene(
    narration_text: str,
    illustration_prompt: str,
    character_sheet_data_uri: Optional[str] = None,
) -> Dict[str, Any]:
    """Background: narration + scene video for one animated storybook scene (minutes)."""
    return asyncio.run(
        generate_scene(
            narration_text=narration_text,
            illustration_prompt=illustration_prompt,
            character_sheet_data_uri=character_sheet_data_uri,
        )
    )


def task_generate_concept_video_scene(video_prompt: str) -> Dict[str, Any]:
    """Background: render one concept video scene."""
    return generate_concept_video_scene(video_prompt=video_prompt)
