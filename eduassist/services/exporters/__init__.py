from __future__ import annotations

from .pdf_exporter import export_markdown_pdf
from .docx_exporter import export_markdown_docx

__all__ = [
    "export_markdown_pdf",
    "export_markdown_docx",
]
