from __future__ import annotations

import os
import re

from fastapi import APIRouter
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from eduassist.schemas.exports import ExportRequest
from eduassist.services.exporters import export_markdown_docx, export_markdown_pdf

router = APIRouter(tags=["exports"])


def _filename(title: str, ext: str) -> str:
    stem = re.sub(r"[^A-Za-z0-9_-]+", "_", title).strip("_")[:60] or "eduassist"
    return f"{stem}.{ext}"


def _download(path, media_type: str, filename: str) -> FileResponse:
    # The temp file is removed once the body has been streamed.
    return FileResponse(path, media_type=media_type, filename=filename, background=BackgroundTask(os.unlink, path))


@router.post("/exports/pdf")
def export_pdf(payload: ExportRequest):
    path = export_markdown_pdf(payload.title, payload.content)
    return _download(path, "application/pdf", _filename(payload.title, "pdf"))


@router.post("/exports/docx")
def export_docx(payload: ExportRequest):
    path = export_markdown_docx(payload.title, payload.content)
    return _download(
        path,
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        _filename(payload.title, "docx"),
    )
