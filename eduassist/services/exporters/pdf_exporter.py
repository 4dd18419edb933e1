from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.pdfgen import canvas

from .markdown_blocks import parse_blocks


# DejaVu covers the non-Latin lesson languages; Helvetica is Latin-1 only.
UNICODE_FONTS = [
    ("DejaVuSans", "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
    ("DejaVuSans", "/usr/share/fonts/truetype/dejavu/DejaVuSansCondensed.ttf"),
    ("NotoSans", "/usr/share/fonts/truetype/noto/NotoSans-Regular.ttf"),
]
HEADING_SIZES = {1: 16, 2: 14, 3: 13}
MARGIN = 18 * mm
BOTTOM = 20 * mm


def _body_font() -> str:
    for name, path in UNICODE_FONTS:
        if name in pdfmetrics.getRegisteredFontNames():
            return name
        if not os.path.exists(path):
            continue
        try:
            pdfmetrics.registerFont(TTFont(name, path))
        except TTFError:
            continue
        return name
    return "Helvetica"


class _PageWriter:
    """Top-down text cursor over a reportlab canvas, breaking pages as it goes."""

    def __init__(self, path: str, title: str):
        self.font = _body_font()
        self.c = canvas.Canvas(path, pagesize=A4)
        self.c.setTitle(title)
        self.width, self.height = A4
        self.y = self.height - MARGIN

    def gap(self, points: float) -> None:
        self.y -= points

    def text(self, text: str, *, size: int = 11, indent: float = 0, prefix: str = "") -> None:
        usable = self.width - 2 * MARGIN - indent - pdfmetrics.stringWidth(prefix, self.font, size)
        lines = simpleSplit(text, self.font, size, usable) or [""]
        for i, chunk in enumerate(lines):
            if self.y < BOTTOM:
                self.c.showPage()
                self.y = self.height - MARGIN
            self.c.setFont(self.font, size)
            lead = prefix if i == 0 else " " * len(prefix)
            self.c.drawString(MARGIN + indent, self.y, lead + chunk)
            self.y -= size + 3

    def save(self) -> None:
        self.c.save()


def export_markdown_pdf(title: str, content: Any) -> Path:
    """Render a generated Markdown (or JSON) result to a PDF file and return its path."""
    fd, out_path = tempfile.mkstemp(prefix="eduassist_", suffix=".pdf")
    os.close(fd)

    page = _PageWriter(out_path, title)
    page.text(title, size=18)
    page.gap(10)

    for block in parse_blocks(content):
        if block.kind == "heading":
            page.gap(6)
            page.text(block.text, size=HEADING_SIZES.get(block.level, 12))
        elif block.kind == "bullet":
            page.text(block.text, indent=4 * mm, prefix="• ")
        elif block.kind == "numbered":
            page.text(block.text, indent=4 * mm, prefix=f"{block.level}. ")
        elif block.kind == "code":
            code = block.text.lstrip()
            page.text(code, size=9, indent=2.5 * (len(block.text) - len(code)))
        else:
            page.text(block.text)
            page.gap(6)

    page.save()
    return Path(out_path)
