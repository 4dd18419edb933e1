"""RQ job queue for the slow media flows, with an inline fallback."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict

import redis
from redis.exceptions import RedisError
from rq import Queue
from rq.job import Job

from eduassist.core.config import settings


logger = logging.getLogger(__name__)


def is_async_enabled() -> bool:
    return bool(settings.ASYNC_QUEUE_ENABLED)


def get_redis_conn() -> redis.Redis:
    return redis.Redis.from_url(str(settings.REDIS_URL))


def get_queue(name: str = "default") -> Queue:
    return Queue(name, connection=get_redis_conn(), default_timeout=int(settings.RQ_DEFAULT_TIMEOUT_SEC))


def _run_inline(fn: Callable[..., Any], args: tuple, kwargs: Dict[str, Any]) -> Dict[str, Any]:
    out = fn(*args, **kwargs)
    return {"job_id": None, "queued": False, "sync_executed": True, "result": out}


def enqueue(fn: Callable[..., Any], *args: Any, queue_name: str = "default", **kwargs: Any) -> Dict[str, Any]:
    """Queue ``fn`` on RQ and return a job handle.

    With the queue disabled, or Redis unreachable, ``fn`` runs inline and the
    handle carries its result (``sync_executed=True``).
    """
    if not is_async_enabled():
        return _run_inline(fn, args, kwargs)

    try:
        job = get_queue(queue_name).enqueue(fn, *args, **kwargs)
    except RedisError as e:
        logger.warning("redis unavailable (%s); running %s inline", e, getattr(fn, "__name__", fn))
        return _run_inline(fn, args, kwargs)
    logger.info("queued %s as job %s on %r", getattr(fn, "__name__", fn), job.id, queue_name)
    return {"job_id": str(job.id), "queued": True, "sync_executed": False}


def fetch_job(job_id: str) -> Job:
    if not is_async_enabled():
        raise RuntimeError("async queue disabled")
    return Job.fetch(job_id, connection=get_redis_conn())


def describe_job(job: Job) -> Dict[str, Any]:
    """Status fields for the jobs endpoint; ``result`` only once the job finished."""
    data: Dict[str, Any] = {
        "job_id": str(job.id),
        "status": str(job.get_status()),
        "enqueued_at": str(job.enqueued_at) if job.enqueued_at else None,
        "started_at": str(job.started_at) if job.started_at else None,
        "ended_at": str(job.ended_at) if job.ended_at else None,
        "exc_info": job.exc_info if job.is_failed else None,
    }
    if job.is_finished:
        data["result"] = job.result
    return data
