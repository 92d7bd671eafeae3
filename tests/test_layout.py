from __future__ import annotations

import pytest

from slideship.core.document import (
    Bullet,
    Code,
    CrystalImageSpec,
    Heading,
    Numbered,
    Paragraph,
    Slide,
    StaticImageSpec,
    Table,
)
from slideship.core.layout import (
    CRYSTAL_SLOTS,
    STATIC_IMAGE_SLOTS,
    LayoutConfig,
    element_height,
    element_spacing,
    layout,
    resolve_crystal,
    resolve_size,
)
from slideship.core.parser import parse
from slideship.core.theme import DEFAULT_THEME


def test_layout_is_idempotent(deck_text: str) -> None:
    for slide in parse(deck_text):
        assert layout(slide) == layout(slide)


def test_single_heading_is_vertically_centered() -> None:
    config = LayoutConfig()
    out = layout(Slide(elements=(Heading("Hi", 1),)), config=config)
    (el,) = out.elements

    # bottom = padding + height; offset = (720 - bottom) / 2 - padding
    bottom = config.padding + element_height(Heading("Hi", 1))
    assert el.y == config.padding + (config.height - bottom) / 2 - config.padding
    assert el.alignment == "center"
    assert el.font_size == 56
    assert el.color == DEFAULT_THEME.heading_color


def test_elements_keep_order_and_increasing_y() -> None:
    slide = Slide(
        elements=(
            Heading("T", 1),
            Paragraph("p"),
            Bullet("b", indent=1),
            Numbered("n", ordinal="4"),
            Code("x = 1\ny = 2"),
        )
    )
    out = layout(slide)
    assert [e.element_type for e in out.elements] == ["heading", "paragraph", "bullet", "numbered", "code"]
    ys = [e.y for e in out.elements]
    assert ys == sorted(ys)

    # Vertical gap is the previous element's height plus its spacing.
    for prev, (a, b) in zip(slide.elements, zip(out.elements, out.elements[1:])):
        assert b.y - a.y == element_height(prev) + element_spacing(prev)


def test_list_prefixes_and_indent() -> None:
    config = LayoutConfig()
    out = layout(Slide(elements=(Bullet("b", indent=2), Numbered("n", ordinal="7"))), config=config)
    bullet, numbered = out.elements
    assert bullet.content == "• b"
    assert bullet.x == config.padding + 2 * config.indent_step
    assert numbered.content == "7. n"
    assert numbered.x == config.padding


def test_sub_headings_are_bold_accent() -> None:
    out = layout(Slide(elements=(Heading("a", 2), Heading("b", 3))))
    h2, h3 = out.elements
    assert (h2.font_size, h3.font_size) == (40, 32)
    assert h2.font_style == "bold"
    assert h2.color == DEFAULT_THEME.accent_color


def test_overflowing_slide_is_not_shifted() -> None:
    config = LayoutConfig()
    slide = Slide(elements=tuple(Paragraph(f"line {i}") for i in range(20)))
    out = layout(slide, config=config)
    assert out.elements[0].y == config.padding


def test_table_gets_placeholder_and_geometry() -> None:
    table = Table(headers=("A", "B"), rows=(("1", "2"),))
    out = layout(Slide(elements=(Heading("T"), table)))
    assert out.elements[1].element_type == "table"
    assert out.elements[1].content == ""
    assert set(out.tables) == {1}
    assert out.tables[1].width == pytest.approx(LayoutConfig().usable_width)


def test_crystal_slots_cycle() -> None:
    specs = tuple(CrystalImageSpec(source=f"{i}.png") for i in range(len(CRYSTAL_SLOTS) + 1))
    out = layout(Slide(crystals=specs))
    positions = [(c.x, c.y) for c in out.crystals]
    assert positions[: len(CRYSTAL_SLOTS)] == [(float(x), float(y)) for x, y in CRYSTAL_SLOTS]
    assert positions[-1] == (float(CRYSTAL_SLOTS[0][0]), float(CRYSTAL_SLOTS[0][1]))


def test_crystal_icon_defaults_to_image_position() -> None:
    c = resolve_crystal(CrystalImageSpec(source="a.png", x=10, y=20), 0)
    assert (c.icon_x, c.icon_y) == (10.0, 20.0)

    c = resolve_crystal(CrystalImageSpec(source="a.png", x=10, y=20, icon_x=1, icon_y=2), 0)
    assert (c.icon_x, c.icon_y) == (1.0, 2.0)


def test_static_image_slots_and_native_size() -> None:
    specs = (StaticImageSpec(source="a.png"), StaticImageSpec(source="b.png", width=100))
    out = layout(Slide(static_images=specs), image_sizes={"b.png": (400, 200)})
    first, second = out.static_images
    assert (first.x, first.y) == tuple(float(v) for v in STATIC_IMAGE_SLOTS[0])
    assert (first.width, first.height) == (200.0, 150.0)
    assert (second.x, second.y) == tuple(float(v) for v in STATIC_IMAGE_SLOTS[1])
    assert (second.width, second.height) == (100.0, 50.0)


def test_resolve_size_keeps_aspect_ratio() -> None:
    assert resolve_size(None, None, native=(300, 100)) == (300.0, 100.0)
    assert resolve_size(150, None, native=(300, 100)) == (150.0, 50.0)
    assert resolve_size(None, 50, native=(300, 100)) == (150.0, 50.0)
    assert resolve_size(10, 10, native=(300, 100)) == (10.0, 10.0)


def test_empty_slide_lays_out_to_nothing() -> None:
    out = layout(Slide())
    assert out.elements == ()
    assert out.tables == {}


def test_numbered_prefix_uses_written_ordinal() -> None:
    (numbered,) = layout(Slide(elements=(Numbered("n", ordinal="07"),))).elements
    assert numbered.content == "07. n"


def test_code_height_counts_trailing_blank_line() -> None:
    code = Code("x = 1\n")
    assert element_height(code) == 24 * 2 + 20
