from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class ResearchRequest(BaseModel):
    topic: str = Field(min_length=1)


class Paper(BaseModel):
    title: str
    authors: List[str]
    year: int
    source: str
    url: str


class RecentPapersInput(BaseModel):
    topic: str


class FutureResearchInput(BaseModel):
    seminal_topic: str
    recent_papers: List[Paper] = Field(default_factory=list)


class ResearchDirection(BaseModel):
    area: str
    description: str


class ResearchDirections(BaseModel):
    research_directions: List[ResearchDirection] = Field(default_factory=list)


class CoordinatorReport(BaseModel):
    report: str


class SearchInput(BaseModel):
    query: str


class SearchResult(BaseModel):
    title: str
    url: str
    snippet: str


class Reference(BaseModel):
    title: str
    url: str


class ResearchAgentReport(BaseModel):
    report: str
    references: List[Reference] = Field(default_factory=list)
