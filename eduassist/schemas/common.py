from __future__ import annotations

from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel


T = TypeVar("T")


class ErrorOut(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class Envelope(BaseModel, Generic[T]):
    """Shape of every JSON response: ``data`` on success, ``error`` on failure."""

    request_id: str
    data: Optional[T] = None
    error: Optional[ErrorOut] = None


class CreatedOut(BaseModel):
    id: int


class QueuedJob(BaseModel):
    job_id: Optional[str] = None
    queued: bool
    sync_executed: bool
    result: Optional[Any] = None
