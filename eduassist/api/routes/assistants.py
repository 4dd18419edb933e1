from __future__ import annotations

from fastapi import APIRouter, Request

from eduassist.schemas.assistants import AssistantRequest, AssistantResponse
from eduassist.schemas.common import Envelope
from eduassist.services.assistant_service import run_calendar_assistant, run_gmail_assistant

router = APIRouter(tags=["assistants"])


@router.post("/assistants/gmail", response_model=Envelope[AssistantResponse])
def gmail_assistant(request: Request, payload: AssistantRequest):
    data = run_gmail_assistant(prompt=payload.prompt)
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/assistants/calendar", response_model=Envelope[AssistantResponse])
def calendar_assistant(request: Request, payload: AssistantRequest):
    data = run_calendar_assistant(prompt=payload.prompt)
    return {"request_id": request.state.request_id, "data": data, "error": None}
