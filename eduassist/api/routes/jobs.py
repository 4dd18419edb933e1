from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request
from redis.exceptions import RedisError
from rq.exceptions import NoSuchJobError

from eduassist.infra.queue import describe_job, fetch_job, is_async_enabled

router = APIRouter(tags=["jobs"])


@router.get("/jobs/status/{job_id}")
def job_status(request: Request, job_id: str) -> Dict[str, Any]:
    if not is_async_enabled():
        raise HTTPException(status_code=400, detail="Async queue disabled (ASYNC_QUEUE_ENABLED=false)")
    try:
        job = fetch_job(str(job_id))
    except NoSuchJobError:
        raise HTTPException(status_code=404, detail="Job not found")
    except RedisError:
        raise HTTPException(status_code=503, detail="Job queue unavailable")
    return {"request_id": request.state.request_id, "data": describe_job(job), "error": None}
