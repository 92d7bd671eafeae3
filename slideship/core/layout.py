from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Literal, assert_never

from slideship.core.document import (
    Bullet,
    Code,
    CrystalImageSpec,
    ElementType,
    Heading,
    Numbered,
    Paragraph,
    Slide,
    SlideElement,
    StaticImageSpec,
    Table,
)
from slideship.core.table_layout import HeuristicTextMeasurer, TableGeometry, TextMeasurer, size_table
from slideship.core.theme import DEFAULT_THEME, Theme

Alignment = Literal["left", "center"]

# Default placement for images without explicit coordinates, indexed by
# `image index % len(slots)`.
CRYSTAL_SLOTS: tuple[tuple[int, int], ...] = ((200, 200), (1080, 200), (200, 520), (1080, 520), (640, 360))
STATIC_IMAGE_SLOTS: tuple[tuple[int, int], ...] = ((640, 360), (200, 360), (1080, 360))

# Used until the renderer reports the real pixel size of an image.
DEFAULT_NATIVE_SIZE: tuple[int, int] = (200, 150)

_HEADING_FONT_SIZES = {1: 56, 2: 40, 3: 32}
_HEADING_LINE_HEIGHTS = {1: 70, 2: 50}


@dataclass(frozen=True, slots=True)
class LayoutConfig:
    width: int = 1280
    height: int = 720
    padding: int = 80
    indent_step: int = 30

    @property
    def usable_width(self) -> int:
        return self.width - self.padding * 2

    @property
    def usable_height(self) -> int:
        return self.height - self.padding * 2


@dataclass(frozen=True, slots=True)
class LayoutElement:
    x: float
    y: float
    content: str
    font_size: int
    color: str
    font_family: str
    element_type: ElementType
    font_style: str = "normal"
    alignment: Alignment = "left"


@dataclass(frozen=True, slots=True)
class ResolvedCrystal:
    source: str
    x: float
    y: float
    width: float
    height: float
    icon_x: float
    icon_y: float


@dataclass(frozen=True, slots=True)
class ResolvedStaticImage:
    source: str
    alt: str
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class SlideLayout:
    """Everything the renderer needs to draw one slide.

    `elements[i]` corresponds to `slide.elements[i]`; table elements are
    placeholders whose geometry lives in `tables[i]`.
    """

    elements: tuple[LayoutElement, ...] = ()
    tables: dict[int, TableGeometry] = field(default_factory=dict)
    crystals: tuple[ResolvedCrystal, ...] = ()
    static_images: tuple[ResolvedStaticImage, ...] = ()


def layout(
    slide: Slide,
    *,
    config: LayoutConfig = LayoutConfig(),
    theme: Theme = DEFAULT_THEME,
    measurer: TextMeasurer | None = None,
    image_sizes: Mapping[str, tuple[int, int]] | None = None,
) -> SlideLayout:
    """Lay out one slide on a fixed canvas. Pure: equal inputs give equal output."""

    measurer = measurer or HeuristicTextMeasurer()
    image_sizes = image_sizes or {}

    placed: list[LayoutElement] = []
    tables: dict[int, TableGeometry] = {}
    cursor = float(config.padding)
    spacing = 0

    for index, element in enumerate(slide.elements):
        placed.append(_style(element, cursor, config=config, theme=theme))
        if isinstance(element, Table):
            tables[index] = size_table(element, usable_width=config.usable_width, measurer=measurer)
        spacing = element_spacing(element)
        cursor += element_height(element) + spacing

    if placed:
        bottom = cursor - spacing
        if bottom < config.usable_height:
            offset = (config.height - bottom) / 2 - config.padding
            placed = [replace(el, y=el.y + offset) for el in placed]

    return SlideLayout(
        elements=tuple(placed),
        tables=tables,
        crystals=tuple(
            resolve_crystal(spec, index, native=image_sizes.get(spec.source, DEFAULT_NATIVE_SIZE))
            for index, spec in enumerate(slide.crystals)
        ),
        static_images=tuple(
            resolve_static_image(spec, index, native=image_sizes.get(spec.source, DEFAULT_NATIVE_SIZE))
            for index, spec in enumerate(slide.static_images)
        ),
    )


def element_height(element: SlideElement) -> float:
    if isinstance(element, Heading):
        return _HEADING_LINE_HEIGHTS.get(element.level, 40) * _line_count(element.content)
    if isinstance(element, (Bullet, Numbered)):
        return 35 * _line_count(element.content)
    if isinstance(element, Code):
        return 24 * _line_count(element.content) + 20
    if isinstance(element, Table):
        return 40 + 40 * len(element.rows)
    return 35


def element_spacing(element: SlideElement) -> float:
    if isinstance(element, Heading):
        return 40 if element.level == 1 else 25
    if isinstance(element, (Bullet, Numbered)):
        return 15
    if isinstance(element, Code):
        return 30
    return 20


def _line_count(content: str) -> int:
    return content.count("\n") + 1


def _style(element: SlideElement, y: float, *, config: LayoutConfig, theme: Theme) -> LayoutElement:
    left = float(config.padding)

    if isinstance(element, Heading):
        return LayoutElement(
            x=left,
            y=y,
            content=element.content,
            font_size=_HEADING_FONT_SIZES.get(element.level, 28),
            color=theme.heading_color if element.level == 1 else theme.accent_color,
            font_family=theme.heading_font,
            font_style="normal" if element.level == 1 else "bold",
            alignment="center",
            element_type="heading",
        )
    if isinstance(element, Bullet):
        return LayoutElement(
            x=left + element.indent * config.indent_step,
            y=y,
            content=f"• {element.content}",
            font_size=24,
            color=theme.body_color,
            font_family=theme.body_font,
            element_type="bullet",
        )
    if isinstance(element, Numbered):
        return LayoutElement(
            x=left + element.indent * config.indent_step,
            y=y,
            content=f"{element.ordinal}. {element.content}",
            font_size=24,
            color=theme.body_color,
            font_family=theme.body_font,
            element_type="numbered",
        )
    if isinstance(element, Code):
        return LayoutElement(
            x=left,
            y=y,
            content=element.content,
            font_size=20,
            color=theme.code_color,
            font_family=theme.code_font,
            element_type="code",
        )
    if isinstance(element, Table):
        return LayoutElement(
            x=left,
            y=y,
            content="",
            font_size=20,
            color=theme.body_color,
            font_family=theme.body_font,
            element_type="table",
        )
    if isinstance(element, Paragraph):
        return LayoutElement(
            x=left,
            y=y,
            content=element.content,
            font_size=24,
            color=theme.body_color,
            font_family=theme.body_font,
            element_type="paragraph",
        )
    assert_never(element)


def resolve_size(
    width: int | None,
    height: int | None,
    *,
    native: tuple[int, int] = DEFAULT_NATIVE_SIZE,
) -> tuple[float, float]:
    """Fill in a missing dimension from the native aspect ratio."""

    native_w, native_h = native
    aspect = native_w / native_h
    if width is not None and height is not None:
        return float(width), float(height)
    if width is not None:
        return float(width), width / aspect
    if height is not None:
        return height * aspect, float(height)
    return float(native_w), float(native_h)


def resolve_crystal(
    spec: CrystalImageSpec,
    index: int,
    *,
    native: tuple[int, int] = DEFAULT_NATIVE_SIZE,
) -> ResolvedCrystal:
    slot_x, slot_y = CRYSTAL_SLOTS[index % len(CRYSTAL_SLOTS)]
    x = float(spec.x if spec.x is not None else slot_x)
    y = float(spec.y if spec.y is not None else slot_y)
    width, height = resolve_size(spec.width, spec.height, native=native)
    return ResolvedCrystal(
        source=spec.source,
        x=x,
        y=y,
        width=width,
        height=height,
        icon_x=float(spec.icon_x) if spec.icon_x is not None else x,
        icon_y=float(spec.icon_y) if spec.icon_y is not None else y,
    )


def resolve_static_image(
    spec: StaticImageSpec,
    index: int,
    *,
    native: tuple[int, int] = DEFAULT_NATIVE_SIZE,
) -> ResolvedStaticImage:
    slot_x, slot_y = STATIC_IMAGE_SLOTS[index % len(STATIC_IMAGE_SLOTS)]
    width, height = resolve_size(spec.width, spec.height, native=native)
    return ResolvedStaticImage(
        source=spec.source,
        alt=spec.alt,
        x=float(spec.x if spec.x is not None else slot_x),
        y=float(spec.y if spec.y is not None else slot_y),
        width=width,
        height=height,
    )
