from __future__ import annotations

import asyncio
from typing import Union

from fastapi import APIRouter, Query, Request

from eduassist.infra.queue import enqueue
from eduassist.schemas.common import Envelope, QueuedJob
from eduassist.schemas.story import (
    CharacterSheetOutput,
    CharacterSheetRequest,
    ConceptImageOutput,
    ConceptImageRequest,
    ConceptVideoPlan,
    ConceptVideoRequest,
    ConceptVideoSceneOutput,
    ConceptVideoSceneRequest,
    SceneOutput,
    SceneRequest,
    StoryAnalysis,
    StoryAnalysisRequest,
    StorybookOutput,
    StorybookRequest,
)
from eduassist.services.animated_storybook_service import (
    analyze_story,
    generate_character_sheet,
    generate_concept_image,
    generate_scene,
)
from eduassist.services.concept_video_service import analyze_concept_for_video, generate_concept_video_scene
from eduassist.services.storybook_service import generate_storybook
from eduassist.tasks.media_tasks import task_generate_concept_video_scene, task_generate_scene

router = APIRouter(tags=["media"])


@router.post("/storybooks", response_model=Envelope[StorybookOutput])
async def storybooks(request: Request, payload: StorybookRequest):
    data = await generate_storybook(**payload.model_dump())
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/animated-storybook/analyze", response_model=Envelope[StoryAnalysis])
def animated_storybook_analyze(request: Request, payload: StoryAnalysisRequest):
    data = analyze_story(**payload.model_dump())
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/animated-storybook/character-sheet", response_model=Envelope[CharacterSheetOutput])
def animated_storybook_character_sheet(request: Request, payload: CharacterSheetRequest):
    data = generate_character_sheet(prompt=payload.prompt)
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/animated-storybook/concept-image", response_model=Envelope[ConceptImageOutput])
def animated_storybook_concept_image(request: Request, payload: ConceptImageRequest):
    data = generate_concept_image(prompt=payload.prompt)
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/animated-storybook/scene", response_model=Envelope[Union[SceneOutput, QueuedJob]])
async def animated_storybook_scene(request: Request, payload: SceneRequest, background: bool = Query(default=False)):
    if background:
        # enqueue() runs the task inline when the queue is disabled, so keep it off the event loop
        data = await asyncio.to_thread(enqueue, task_generate_scene, queue_name="media", **payload.model_dump())
    else:
        data = await generate_scene(**payload.model_dump())
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/concept-video/analyze", response_model=Envelope[ConceptVideoPlan])
def concept_video_analyze(request: Request, payload: ConceptVideoRequest):
    data = analyze_concept_for_video(**payload.model_dump())
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/concept-video/scene", response_model=Envelope[Union[ConceptVideoSceneOutput, QueuedJob]])
def concept_video_scene(request: Request, payload: ConceptVideoSceneRequest, background: bool = Query(default=False)):
    if background:
        data = enqueue(task_generate_concept_video_scene, payload.video_prompt, queue_name="media")
    else:
        data = generate_concept_video_scene(video_prompt=payload.video_prompt)
    return {"request_id": request.state.request_id, "data": data, "error": None}
