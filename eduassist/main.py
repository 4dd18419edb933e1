from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

import openai
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from eduassist.core.config import settings
from eduassist.api.routes.health import router as health_router
from eduassist.api.routes.llm import router as llm_router
from eduassist.api.routes.tools import router as tools_router
from eduassist.api.routes.teaching import router as teaching_router
from eduassist.api.routes.assessment import router as assessment_router
from eduassist.api.routes.media import router as media_router
from eduassist.api.routes.research import router as research_router
from eduassist.api.routes.assistants import router as assistants_router
from eduassist.api.routes.students import router as students_router
from eduassist.api.routes.exports import router as exports_router
from eduassist.api.routes.jobs import router as jobs_router
from eduassist.db.base import Base
from eduassist.db.session import engine
from eduassist.services.generation import GenerationError
from eduassist.services.student_service import StoreError


logging.basicConfig(
    level=str(settings.LOG_LEVEL or "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def envelope(request_id: str, data: Any = None, error: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {"request_id": request_id, "data": data, "error": error}


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = req_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = req_id
    return response


def _error_response(request: Request, status_code: int, error: Dict[str, Any]) -> JSONResponse:
    req_id = getattr(request.state, "request_id", str(uuid.uuid4()))
    return JSONResponse(
        status_code=status_code,
        content=envelope(request_id=req_id, data=None, error=error),
        headers={"X-Request-ID": req_id},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if isinstance(detail, dict):
        code = str(detail.get("code") or "HTTP_ERROR")
        message = detail.get("message") or str(detail)
        error = {"code": code, "message": message, "details": detail}
    else:
        error = {"code": "HTTP_ERROR", "message": str(detail)}
    return _error_response(request, exc.status_code, error)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error_response(
        request,
        422,
        {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request",
            "details": {"errors": exc.errors()},
        },
    )


@app.exception_handler(GenerationError)
async def generation_exception_handler(request: Request, exc: GenerationError):
    logger.warning("generation failed on %s: %s", request.url.path, exc)
    return _error_response(request, 502, {"code": "GENERATION_FAILED", "message": str(exc)})


@app.exception_handler(openai.APIError)
async def provider_exception_handler(request: Request, exc: openai.APIError):
    logger.warning("generation API error on %s: %s", request.url.path, exc)
    return _error_response(request, 502, {"code": "GENERATION_FAILED", "message": "The generation service request failed."})


@app.exception_handler(StoreError)
async def store_exception_handler(request: Request, exc: StoreError):
    return _error_response(request, 503, {"code": "STORE_UNAVAILABLE", "message": str(exc)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s", request.url.path)
    return _error_response(request, 500, {"code": "INTERNAL_ERROR", "message": str(exc)})


@app.on_event("startup")
def create_tables():
    """Local runs: create missing tables. Production schemas come from alembic."""
    if settings.DB_AUTO_CREATE:
        Base.metadata.create_all(bind=engine)


app.include_router(health_router, prefix="/api")
app.include_router(llm_router, prefix="/api")
app.include_router(tools_router, prefix="/api")
app.include_router(teaching_router, prefix="/api")
app.include_router(assessment_router, prefix="/api")
app.include_router(media_router, prefix="/api")
app.include_router(research_router, prefix="/api")
app.include_router(assistants_router, prefix="/api")
app.include_router(students_router, prefix="/api")
app.include_router(exports_router, prefix="/api")
app.include_router(jobs_router, prefix="/api")
