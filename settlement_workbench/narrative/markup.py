"""Parser for the narrative mini-format.

Lines starting with ``# `` are titles and lines starting with ``##`` are
section headings. Every other non-blank line is a paragraph of its own;
``**text**`` marks bold spans.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal

_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_SECTION_RE = re.compile(r"^##\s*")
_TITLE_RE = re.compile(r"^#\s*")


@dataclass
class TextSpan:
    """Run of text, optionally emphasized."""

    text: str
    bold: bool = False


@dataclass
class NarrativeBlock:
    """Title, section heading or paragraph."""

    kind: Literal["title", "section", "paragraph"]
    spans: list[TextSpan] = field(default_factory=list)

    @property
    def plain_text(self) -> str:
        """Text with emphasis markers removed."""
        return "".join(span.text for span in self.spans)


def parse_spans(text: str) -> list[TextSpan]:
    """Split a line into plain and bold spans. Unpaired markers stay literal."""
    spans: list[TextSpan] = []
    position = 0
    for match in _BOLD_RE.finditer(text):
        if match.start() > position:
            spans.append(TextSpan(text[position : match.start()]))
        spans.append(TextSpan(match.group(1), bold=True))
        position = match.end()
    if position < len(text):
        spans.append(TextSpan(text[position:]))
    return spans


def parse_narrative(text: str) -> list[NarrativeBlock]:
    """Parse narrative text into blocks.

    Blank lines are skipped; each remaining line becomes one block.

    Args:
        text: Narrative text.

    Returns:
        Blocks in document order.
    """
    blocks: list[NarrativeBlock] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if line.startswith("# "):
            blocks.append(NarrativeBlock("title", parse_spans(_TITLE_RE.sub("", line))))
        elif line.startswith("##"):
            blocks.append(NarrativeBlock("section", parse_spans(_SECTION_RE.sub("", line))))
        else:
            blocks.append(NarrativeBlock("paragraph", parse_spans(line)))
    return blocks
