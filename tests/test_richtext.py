from __future__ import annotations

import pytest

from slideship.core.richtext import Segment, decode, decode_lines, encode, plain_text


def test_encode_bold_then_italic() -> None:
    assert encode("a **b** c") == "a {b}b{/b} c"
    assert encode("a *b* c") == "a {i}b{/i} c"
    assert encode("**x** and *y*") == "{b}x{/b} and {i}y{/i}"


@pytest.mark.parametrize("text", ["2 * 3 = 6", "**open only", "a *b", "trailing **"])
def test_unbalanced_markers_stay_literal(text: str) -> None:
    assert plain_text(encode(text)) == text


def test_italic_nested_inside_bold() -> None:
    segs = decode(encode("**bold *nested* end**"))
    assert segs == [
        Segment("bold ", bold=True),
        Segment("nested", bold=True, italic=True),
        Segment(" end", bold=True),
    ]


def test_decode_ors_outer_style_onto_nested_segments() -> None:
    segs = decode("{b}a{i}b{/i}c{/b}")
    assert segs == [
        Segment("a", bold=True),
        Segment("b", bold=True, italic=True),
        Segment("c", bold=True),
    ]


def test_decode_plain_prefix_and_suffix() -> None:
    assert decode("x {i}y{/i} z") == [Segment("x "), Segment("y", italic=True), Segment(" z")]


def test_decode_unclosed_tag_keeps_remainder_as_plain() -> None:
    assert decode("hi {b}there") == [Segment("hi "), Segment("{b}there")]


def test_decode_lines_splits_on_newlines_and_keeps_style() -> None:
    lines = decode_lines("{b}one\ntwo{/b} three")
    assert lines == [
        [Segment("one", bold=True)],
        [Segment("two", bold=True), Segment(" three")],
    ]


def test_decode_lines_single_line_without_tags() -> None:
    assert decode_lines("just text") == [[Segment("just text")]]
    assert decode_lines("") == []


def test_plain_text_strips_tags() -> None:
    assert plain_text("{b}a{/b}{i}b{/i}") == "ab"


def test_decode_unterminated_marker_is_one_plain_segment() -> None:
    assert decode(encode("*unterminated")) == [Segment("*unterminated")]


def test_decode_lines_agrees_with_newline_count() -> None:
    assert decode_lines("x\n") == [[Segment("x")], []]
    assert decode_lines("a\n\nb") == [[Segment("a")], [], [Segment("b")]]
    for content in ("x\n", "a\n\nb", "{i}one{/i}\ntwo\n"):
        assert len(decode_lines(content)) == content.count("\n") + 1
