from __future__ import annotations

import re
from dataclasses import dataclass

BOLD_OPEN = "{b}"
BOLD_CLOSE = "{/b}"
ITALIC_OPEN = "{i}"
ITALIC_CLOSE = "{/i}"

_BOLD_RE = re.compile(r"\*\*(.+?)\*\*", re.DOTALL)
# Italic runs never contain an asterisk, so `**` left over from an unbalanced
# bold marker stays literal.
_ITALIC_RE = re.compile(r"\*([^*]+)\*")
_TAG_RE = re.compile(r"\{/?[bi]\}")


@dataclass(frozen=True, slots=True)
class Segment:
    text: str
    bold: bool = False
    italic: bool = False


def encode(text: str) -> str:
    """Convert `**bold**` and `*italic*` markers into `{b}`/`{i}` tags.

    Bold pairs are replaced first; italic pairs are then matched on the result.
    Unbalanced markers are left as literal characters.
    """

    with_bold = _BOLD_RE.sub(lambda m: f"{BOLD_OPEN}{m.group(1)}{BOLD_CLOSE}", text)
    return _ITALIC_RE.sub(lambda m: f"{ITALIC_OPEN}{m.group(1)}{ITALIC_CLOSE}", with_bold)


def decode(content: str) -> list[Segment]:
    """Decode tagged content into a flat list of styled segments."""

    segments: list[Segment] = []
    remaining = content

    while remaining:
        bold_at = remaining.find(BOLD_OPEN)
        italic_at = remaining.find(ITALIC_OPEN)

        if bold_at == -1 and italic_at == -1:
            segments.append(Segment(remaining))
            break

        if italic_at == -1 or (bold_at != -1 and bold_at < italic_at):
            start, is_bold = bold_at, True
        else:
            start, is_bold = italic_at, False

        if start > 0:
            segments.append(Segment(remaining[:start]))

        open_tag, close_tag, other_open = (
            (BOLD_OPEN, BOLD_CLOSE, ITALIC_OPEN) if is_bold else (ITALIC_OPEN, ITALIC_CLOSE, BOLD_OPEN)
        )
        end = remaining.find(close_tag, start)
        if end == -1:
            segments.append(Segment(remaining[start:]))
            break

        inner = remaining[start + len(open_tag) : end]
        if inner:
            if other_open in inner:
                for seg in decode(inner):
                    segments.append(Segment(seg.text, bold=seg.bold or is_bold, italic=seg.italic or not is_bold))
            else:
                segments.append(Segment(inner, bold=is_bold, italic=not is_bold))

        remaining = remaining[end + len(close_tag) :]

    return segments


def decode_lines(content: str) -> list[list[Segment]]:
    """Decode tagged content and split it on explicit newlines, keeping styles."""

    lines: list[list[Segment]] = []
    current: list[Segment] = []

    for seg in decode(content):
        parts = seg.text.split("\n")
        for i, part in enumerate(parts):
            if i > 0:
                lines.append(current)
                current = []
            if part:
                current.append(Segment(part, bold=seg.bold, italic=seg.italic))

    # A trailing newline still yields an empty final line.
    if content:
        lines.append(current)

    return lines


def plain_text(content: str) -> str:
    """Strip emphasis tags, leaving only the displayed characters."""

    return _TAG_RE.sub("", content)
