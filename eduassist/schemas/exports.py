from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ExportRequest(BaseModel):
    title: str = Field(default="EduAssist", min_length=1)
    content: Any
