from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from slideship.core.document import Table
from slideship.core.richtext import plain_text


class TextMeasurer(Protocol):
    """Width/line-height oracle for the table font.

    Renderers that can measure real glyphs pass their own implementation;
    layout falls back to `HeuristicTextMeasurer`.
    """

    @property
    def line_height(self) -> float: ...

    def text_width(self, text: str, *, bold: bool = False) -> float: ...


@dataclass(frozen=True, slots=True)
class HeuristicTextMeasurer:
    """Average-glyph estimate: each character is `em_width` of the font size."""

    font_size: float = 20.0
    em_width: float = 0.56
    bold_scale: float = 1.08
    line_spacing: float = 1.2

    @property
    def line_height(self) -> float:
        return self.font_size * self.line_spacing

    def text_width(self, text: str, *, bold: bool = False) -> float:
        width = len(text) * self.em_width * self.font_size
        return width * self.bold_scale if bold else width


@dataclass(frozen=True, slots=True)
class TableStyle:
    padding_x: float = 15
    padding_y: float = 10
    min_cell_height: float = 40
    min_col_width: float = 60
    max_col_width: float = 500


@dataclass(frozen=True, slots=True)
class TableGeometry:
    """Resolved table box. Cells keep their emphasis tags for the renderer."""

    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    column_widths: tuple[float, ...]
    header_height: float
    row_heights: tuple[float, ...]

    @property
    def width(self) -> float:
        return sum(self.column_widths)

    @property
    def height(self) -> float:
        return self.header_height + sum(self.row_heights)


def wrap_text(text: str, width: float | None, measurer: TextMeasurer, *, bold: bool = False) -> list[str]:
    """Greedy word wrap. Words wider than `width` overflow on their own line."""

    out: list[str] = []
    for para in text.split("\n"):
        words = para.split()
        if not words:
            out.append("")
            continue
        if width is None:
            out.append(" ".join(words))
            continue
        line = words[0]
        for word in words[1:]:
            candidate = f"{line} {word}"
            if measurer.text_width(candidate, bold=bold) <= width:
                line = candidate
            else:
                out.append(line)
                line = word
        out.append(line)
    return out


def fit_column_widths(natural: Sequence[float], *, usable_width: float, min_width: float) -> list[float]:
    """Scale column widths so they add up to `usable_width`.

    Shrinking never takes a column under `min_width`: such columns are pinned
    at the minimum and the remaining ones absorb the difference. When the
    minimums alone do not fit, every column gets the minimum.
    """

    total = sum(natural)
    if not natural or total == usable_width:
        return list(natural)

    if total < usable_width:
        scale = usable_width / total
        return [w * scale for w in natural]

    if min_width * len(natural) >= usable_width:
        return [min_width] * len(natural)

    pinned: set[int] = set()
    while True:
        free_total = sum(w for i, w in enumerate(natural) if i not in pinned)
        scale = (usable_width - min_width * len(pinned)) / free_total
        newly_pinned = {i for i, w in enumerate(natural) if i not in pinned and w * scale < min_width}
        if not newly_pinned:
            return [min_width if i in pinned else w * scale for i, w in enumerate(natural)]
        pinned |= newly_pinned


def size_table(
    table: Table,
    *,
    usable_width: float,
    measurer: TextMeasurer,
    style: TableStyle = TableStyle(),
) -> TableGeometry:
    num_cols = len(table.headers)

    natural: list[float] = []
    for col in range(num_cols):
        widest = _text_width(table.headers[col], measurer, bold=True)
        for row in table.rows:
            cell = row[col] if col < len(row) else ""
            widest = max(widest, _text_width(cell, measurer, bold=False))
        width = widest + style.padding_x * 2
        natural.append(min(max(width, style.min_col_width), style.max_col_width))

    widths = fit_column_widths(natural, usable_width=usable_width, min_width=style.min_col_width)

    def wrap_width(col: int) -> float | None:
        # Cells past the header's columns have no column to wrap into.
        return widths[col] - style.padding_x * 2 if col < len(widths) else None

    def cell_height(text: str, col: int, *, bold: bool) -> float:
        lines = wrap_text(plain_text(text), wrap_width(col), measurer, bold=bold)
        return len(lines) * measurer.line_height + style.padding_y * 2

    header_heights = [
        max(cell_height(h, col, bold=True), style.min_cell_height) for col, h in enumerate(table.headers)
    ]
    header_height = sum(header_heights) / len(header_heights) if header_heights else style.min_cell_height

    row_heights: list[float] = []
    for row in table.rows:
        tallest = style.min_cell_height
        for col, cell in enumerate(row):
            tallest = max(tallest, cell_height(cell, col, bold=False))
        row_heights.append(tallest)

    return TableGeometry(
        headers=table.headers,
        rows=table.rows,
        column_widths=tuple(widths),
        header_height=header_height,
        row_heights=tuple(row_heights),
    )


def _text_width(text: str, measurer: TextMeasurer, *, bold: bool) -> float:
    return max(measurer.text_width(line, bold=bold) for line in plain_text(text).split("\n"))
