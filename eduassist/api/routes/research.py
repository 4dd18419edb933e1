from __future__ import annotations

from fastapi import APIRouter, Request

from eduassist.schemas.common import Envelope
from eduassist.schemas.research import CoordinatorReport, ResearchAgentReport, ResearchRequest
from eduassist.services.research_service import run_academic_coordinator, run_academic_research_agent

router = APIRouter(tags=["research"])


@router.post("/research/coordinator", response_model=Envelope[CoordinatorReport])
def research_coordinator(request: Request, payload: ResearchRequest):
    data = run_academic_coordinator(topic=payload.topic)
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/research/agent", response_model=Envelope[ResearchAgentReport])
def research_agent(request: Request, payload: ResearchRequest):
    data = run_academic_research_agent(topic=payload.topic)
    return {"request_id": request.state.request_id, "data": data, "error": None}
