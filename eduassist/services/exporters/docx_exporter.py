from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any

from docx import Document
from docx.oxml.ns import qn
from docx.shared import Pt

from .markdown_blocks import parse_blocks


def _set_body_font(doc: Document, name: str = "Calibri") -> None:
    style = doc.styles["Normal"]
    style.font.name = name
    style._element.rPr.rFonts.set(qn("w:ascii"), name)
    style._element.rPr.rFonts.set(qn("w:hAnsi"), name)
    style._element.rPr.rFonts.set(qn("w:cs"), name)


def export_markdown_docx(title: str, content: Any) -> Path:
    """Render a generated Markdown (or JSON) result to a DOCX file and return its path."""
    fd, out_path = tempfile.mkstemp(prefix="eduassist_", suffix=".docx")
    os.close(fd)

    doc = Document()
    _set_body_font(doc)
    doc.add_heading(title, level=0)

    for block in parse_blocks(content):
        if block.kind == "heading":
            doc.add_heading(block.text, level=min(max(block.level, 1), 4))
        elif block.kind == "bullet":
            doc.add_paragraph(block.text, style="List Bullet")
        elif block.kind == "numbered":
            doc.add_paragraph(block.text, style="List Number")
        elif block.kind == "code":
            run = doc.add_paragraph().add_run(block.text)
            run.font.name = "Courier New"
            run.font.size = Pt(9)
        else:
            doc.add_paragraph(block.text)

    doc.save(out_path)
    return Path(out_path)
