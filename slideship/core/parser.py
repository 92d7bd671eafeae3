from __future__ import annotations

import re

from slideship.core.document import (
    Bullet,
    Code,
    CrystalImageSpec,
    Document,
    Heading,
    Numbered,
    Paragraph,
    Slide,
    SlideElement,
    StaticImageSpec,
    Table,
)
from slideship.core.richtext import encode

SLIDE_SEPARATOR_RE = re.compile(r"^---$", re.MULTILINE)

CODE_FENCE = "```"
CRYSTAL_MARKER = "[crystal]"

_CRYSTAL_RE = re.compile(r"^!\[crystal\]\(([^)]+)\)(?:\{([^}]+)\})?$")
_IMAGE_RE = re.compile(r"^!\[([^\]]*)\]\(([^)]+)\)(?:\{([^}]+)\})?$")
_HEADING_RE = re.compile(r"^(#{1,3})\s+(.+)$")
_BULLET_RE = re.compile(r"^(\s*)[-*]\s+(.+)$")
_NUMBERED_RE = re.compile(r"^(\s*)(\d+)\.\s+(.+)$")
_TABLE_ROW_RE = re.compile(r"^\|(.+)\|$")
_TABLE_SEPARATOR_RE = re.compile(r"^\|[-:|\s]+\|$")

_ATTR_RE = re.compile(r"\b(cx|cy|x|y|width|w|height|h)\s*[=:]\s*(\d+)")
_ATTR_NAMES = {
    "x": "x",
    "y": "y",
    "cx": "icon_x",
    "cy": "icon_y",
    "w": "width",
    "width": "width",
    "h": "height",
    "height": "height",
}

# A continuation never swallows a line that starts its own element.
_ELEMENT_START_RES = (
    re.compile(r"^#{1,3}\s+"),
    re.compile(r"^\s*[-*]\s+"),
    re.compile(r"^\s*\d+\.\s+"),
    re.compile(r"^!\["),
)


def split_slides(text: str) -> list[str]:
    """Split source text on `---` separator lines, dropping empty chunks."""

    chunks = (chunk.strip() for chunk in SLIDE_SEPARATOR_RE.split(text))
    return [chunk for chunk in chunks if chunk]


def parse(text: str) -> Document:
    """Compile markup text into a Document. Never raises on malformed input."""

    return Document(slides=tuple(parse_slide(chunk) for chunk in split_slides(text)))


def parse_slide(text: str) -> Slide:
    lines = text.split("\n")
    elements: list[SlideElement] = []
    crystals: list[CrystalImageSpec] = []
    static_images: list[StaticImageSpec] = []

    in_code = False
    code_lines: list[str] = []

    i = 0
    while i < len(lines):
        line = lines[i]

        if line.startswith(CODE_FENCE):
            if in_code:
                elements.append(Code(content="\n".join(code_lines)))
                code_lines = []
            in_code = not in_code
            i += 1
            continue

        if in_code:
            code_lines.append(line)
            i += 1
            continue

        if not line.strip():
            i += 1
            continue

        stripped = line.strip()

        crystal = _CRYSTAL_RE.match(stripped)
        if crystal:
            attrs = _parse_attrs(crystal.group(2))
            crystals.append(CrystalImageSpec(source=crystal.group(1).strip(), **attrs))
            i += 1
            continue

        image = _IMAGE_RE.match(stripped)
        if image and CRYSTAL_MARKER not in line:
            attrs = _parse_attrs(image.group(3))
            attrs.pop("icon_x", None)
            attrs.pop("icon_y", None)
            static_images.append(StaticImageSpec(source=image.group(2).strip(), alt=image.group(1), **attrs))
            i += 1
            continue

        heading = _HEADING_RE.match(line)
        if heading:
            content, i = _continue(heading.group(2), lines, i, paragraph=False)
            elements.append(Heading(content=encode(content), level=len(heading.group(1))))
            i += 1
            continue

        bullet = _BULLET_RE.match(line)
        if bullet:
            content, i = _continue(bullet.group(2), lines, i, paragraph=False)
            elements.append(Bullet(content=encode(content), indent=len(bullet.group(1)) // 2))
            i += 1
            continue

        numbered = _NUMBERED_RE.match(line)
        if numbered:
            content, i = _continue(numbered.group(3), lines, i, paragraph=False)
            elements.append(
                Numbered(
                    content=encode(content),
                    ordinal=numbered.group(2),
                    indent=len(numbered.group(1)) // 2,
                )
            )
            i += 1
            continue

        header = _TABLE_ROW_RE.match(stripped)
        if header:
            table, i = _read_table(header.group(1), lines, i + 1)
            elements.append(table)
            continue

        content, i = _continue(line.strip(), lines, i, paragraph=True)
        elements.append(Paragraph(content=encode(content)))
        i += 1

    return Slide(elements=tuple(elements), crystals=tuple(crystals), static_images=tuple(static_images))


def _parse_attrs(raw: str | None) -> dict[str, int]:
    """Parse `{x=100 y:200 w=50}` style attributes; the first occurrence of a key wins."""

    attrs: dict[str, int] = {}
    for m in _ATTR_RE.finditer(raw or ""):
        attrs.setdefault(_ATTR_NAMES[m.group(1)], int(m.group(2)))
    return attrs


def _read_table(header_body: str, lines: list[str], i: int) -> tuple[Table, int]:
    """Read a table whose header was matched just before line `i`.

    Returns the table and the index of the first line after it.
    """

    headers = [cell.strip() for cell in header_body.split("|")]
    while headers and not headers[0]:
        headers.pop(0)
    while headers and not headers[-1]:
        headers.pop()

    if i < len(lines) and _TABLE_SEPARATOR_RE.match(lines[i].strip()):
        i += 1

    rows: list[tuple[str, ...]] = []
    while i < len(lines):
        row = lines[i].strip()
        if not _TABLE_ROW_RE.match(row):
            break
        rows.append(tuple(encode(cell.strip()) for cell in row[1:-1].split("|")))
        i += 1

    return Table(headers=tuple(encode(h) for h in headers), rows=tuple(rows)), i


def _starts_element(line: str) -> bool:
    if not line.strip() or line.startswith(CODE_FENCE):
        return True
    return any(r.match(line) for r in _ELEMENT_START_RES)


def _wants_continuation(content: str, *, paragraph: bool) -> bool:
    if content.endswith("\\") or content.endswith("  "):
        return True
    if not paragraph:
        return False
    # Unclosed emphasis in a paragraph pulls in the next line.
    if content.count("**") % 2:
        return True
    return content.replace("**", "").count("*") % 2 == 1


def _strip_marker(content: str) -> str:
    if content.endswith("\\"):
        return content[:-1]
    if content.endswith("  "):
        return content[:-2]
    return content


def _continue(content: str, lines: list[str], i: int, *, paragraph: bool) -> tuple[str, int]:
    """Merge following lines into `content` while it asks for continuation.

    Returns the merged content and the index of the last consumed line.
    """

    while _wants_continuation(content, paragraph=paragraph):
        content = _strip_marker(content)
        if i + 1 >= len(lines) or _starts_element(lines[i + 1]):
            break
        i += 1
        content += "\n" + lines[i].strip()
    return content, i
