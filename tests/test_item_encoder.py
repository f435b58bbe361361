"""Unit tests for canonical and display text generation."""

import pytest

from figuredbass.glyph_table import GlyphFont, GlyphRegistry
from figuredbass.item_encoder import (
    DisplaySegments,
    canonical_text,
    display_segments,
    display_text,
    display_text_by_name,
)
from figuredbass.item_parser import ItemParser
from figuredbass.models import FiguredBassItem
from figuredbass.symbols import Modifier, Parenthesis


def _font() -> GlyphFont:
    return GlyphFont.from_dict(
        {
            "display_name": "Test",
            "default_pitch": 1.0,
            "default_line_height": 10.0,
            "accidentals": ["", "F", "f", "n", "s", "S", "+", "\\", "/"],
            "parentheses": ["", "(", ")", "[", "]"],
            "digits": [{"plain": list("0123456789"), "slash": list("ABCDEFGHIJ")}],
        }
    )


def _bare_font() -> GlyphFont:
    return GlyphFont.from_dict({"display_name": "Bare", "digits": [{"plain": []}]})


def _item(raw: str) -> FiguredBassItem:
    return ItemParser().parse(raw)


def test_canonical_text_of_constructed_items() -> None:
    assert canonical_text(FiguredBassItem(digit=6)) == "6"
    assert canonical_text(FiguredBassItem(prefix=Modifier.DOUBLE_SHARP, digit=3, continuation_line=True)) == "##3_"
    assert canonical_text(FiguredBassItem(digit=7, suffix=Modifier.SLASH)) == "7/"


def test_canonical_text_writes_every_bracket_slot() -> None:
    item = FiguredBassItem(
        prefix=Modifier.FLAT,
        digit=5,
        suffix=Modifier.PLUS,
        continuation_line=True,
        parentheses=(
            Parenthesis.ROUND_OPEN,
            Parenthesis.SQUARED_OPEN,
            Parenthesis.SQUARED_CLOSED,
            Parenthesis.ROUND_CLOSED,
            Parenthesis.ROUND_CLOSED,
        ),
    )
    assert canonical_text(item) == "(b[5]+)_)"


def test_display_uses_font_glyphs() -> None:
    assert display_text(_item("#6"), _font()) == "s6"
    assert display_text(_item("bb4"), _font()) == "F4"


def test_slash_suffix_fuses_with_digit() -> None:
    segments = display_segments(_item("6/"), _font())
    assert segments == DisplaySegments(prefix="", body="G", suffix="", trailer="")


def test_bracket_between_digit_and_suffix_prevents_fusion() -> None:
    assert display_text(_item("6)/"), _font()) == "6)/"


def test_missing_fused_glyph_keeps_separate_suffix() -> None:
    # the test font has no backslash variant
    assert display_text(_item("6\\"), _font()) == "6\\"


def test_missing_glyphs_fall_back_to_tokens() -> None:
    assert display_text(_item("(#6_)"), _bare_font()) == "(#6)"


def test_lone_accidental_takes_the_column() -> None:
    segments = display_segments(_item("(#)"), _font())
    assert segments.prefix == "("
    assert segments.body == "s"
    assert segments.suffix == ")"


def test_bracket_after_line_goes_to_trailer() -> None:
    segments = display_segments(_item("6_)"), _font())
    assert segments.body == "6"
    assert segments.trailer == ")"


def test_continuation_only_has_no_body() -> None:
    assert display_segments(_item("_"), _font()).text == ""


def test_historic_style_falls_back_to_modern_when_missing() -> None:
    assert display_text(_item("5"), _font(), style=1) == "5"


@pytest.mark.parametrize("raw", ["6", "#6\\", "(b)", "[5+]_", "h", "((#", "9/", "_)"])
def test_display_never_fails(raw: str) -> None:
    item = _item(raw)
    assert isinstance(display_text(item, _font()), str)
    assert isinstance(display_text(item, _bare_font()), str)


def test_display_text_by_name_falls_back_to_default() -> None:
    registry = GlyphRegistry([_font(), _bare_font()])
    assert display_text_by_name(_item("#6"), registry, "Bare") == "#6"
    assert display_text_by_name(_item("#6"), registry, "Missing") == "s6"
