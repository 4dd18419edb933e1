from __future__ import annotations

from fastapi import APIRouter, Request

from eduassist.schemas.common import Envelope
from eduassist.schemas.teaching import (
    ConceptImagesOutput,
    ConceptImagesRequest,
    ExplainerOutput,
    ExplainerRequest,
    LessonPlanOutput,
    LessonPlanRequest,
    WeeklyPlanOutput,
    WeeklyPlanRequest,
    WorksheetRequest,
    WorksheetsOutput,
)
from eduassist.services.concept_image_service import generate_concept_images
from eduassist.services.lesson_plan_service import create_lesson_plan
from eduassist.services.teaching_service import explain_teaching_methods, generate_weekly_plan, generate_worksheets

router = APIRouter(tags=["teaching"])


@router.post("/explainer", response_model=Envelope[ExplainerOutput])
def explainer(request: Request, payload: ExplainerRequest):
    data = explain_teaching_methods(**payload.model_dump())
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/images/concept", response_model=Envelope[ConceptImagesOutput])
async def concept_images(request: Request, payload: ConceptImagesRequest):
    data = await generate_concept_images(**payload.model_dump())
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/lesson-plans", response_model=Envelope[LessonPlanOutput])
async def lesson_plans(request: Request, payload: LessonPlanRequest):
    data = await create_lesson_plan(**payload.model_dump())
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/weekly-plans", response_model=Envelope[WeeklyPlanOutput])
def weekly_plans(request: Request, payload: WeeklyPlanRequest):
    data = generate_weekly_plan(**payload.model_dump())
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/worksheets", response_model=Envelope[WorksheetsOutput])
def worksheets(request: Request, payload: WorksheetRequest):
    data = generate_worksheets(**payload.model_dump())
    return {"request_id": request.state.request_id, "data": data, "error": None}
