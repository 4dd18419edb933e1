"""Split a Markdown result into the few block kinds the exporters render."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, List


_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*)$")
_BULLET_RE = re.compile(r"^\s*[-*+]\s+(.*)$")
_NUMBERED_RE = re.compile(r"^\s*(\d+)[.)]\s+(.*)$")
_EMPHASIS_RE = re.compile(r"(\*\*|__|\*|_|`)(.+?)\1")


@dataclass
class Block:
    kind: str  # heading | bullet | numbered | paragraph | code
    text: str
    level: int = 0


def as_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    return json.dumps(content, ensure_ascii=False, indent=2)


def strip_inline(text: str) -> str:
    return _EMPHASIS_RE.sub(r"\2", text).strip()


def parse_blocks(content: Any) -> List[Block]:
    text = as_text(content)
    if not isinstance(content, str):
        # structured results keep their layout
        return [Block("code", line) for line in text.splitlines()]

    blocks: List[Block] = []
    paragraph: List[str] = []

    def flush():
        if paragraph:
            blocks.append(Block("paragraph", strip_inline(" ".join(paragraph))))
            paragraph.clear()

    for raw in text.splitlines():
        line = raw.rstrip()
        if not line.strip() or line.strip().startswith("```"):
            flush()
            continue
        m = _HEADING_RE.match(line)
        if m:
            flush()
            blocks.append(Block("heading", strip_inline(m.group(2)), level=len(m.group(1))))
            continue
        m = _BULLET_RE.match(line)
        if m:
            flush()
            blocks.append(Block("bullet", strip_inline(m.group(1))))
            continue
        m = _NUMBERED_RE.match(line)
        if m:
            flush()
            blocks.append(Block("numbered", strip_inline(m.group(2)), level=int(m.group(1))))
            continue
        paragraph.append(line.strip())
    flush()
    return blocks
