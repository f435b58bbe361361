"""ItemEncoder: canonical text and glyph display text for figured-bass items."""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from figuredbass.glyph_table import GlyphFont, GlyphRegistry
from figuredbass.symbols import (
    CANONICAL_CONTINUATION,
    CANONICAL_MODIFIER,
    CANONICAL_PARENTHESIS,
    Modifier,
    Parenthesis,
)

if TYPE_CHECKING:
    from figuredbass.models import FiguredBassItem


def canonical_text(item: FiguredBassItem) -> str:
    """
    Serialize an item back to the text the parser accepts.

    Tokens are written in slot order with one fixed spelling per symbol, so
    parsing the result gives back an equal item.
    """
    p = item.parentheses
    return "".join(
        [
            CANONICAL_PARENTHESIS[p[0]],
            CANONICAL_MODIFIER[item.prefix],
            CANONICAL_PARENTHESIS[p[1]],
            str(item.digit) if item.digit is not None else "",
            CANONICAL_PARENTHESIS[p[2]],
            CANONICAL_MODIFIER[item.suffix],
            CANONICAL_PARENTHESIS[p[3]],
            CANONICAL_CONTINUATION if item.continuation_line else "",
            CANONICAL_PARENTHESIS[p[4]],
        ]
    )


class DisplaySegments(NamedTuple):
    """
    Display text split around the alignment column.

    Attributes:
        prefix:  Glyphs left of the column (aligned across the stack).
        body:    The column glyph: the digit, or the lone accidental of a digitless item.
        suffix:  Glyphs right of the column, up to the continuation line.
        trailer: Glyph after the continuation line (the fifth parenthesis).
    """

    prefix: str
    body: str
    suffix: str
    trailer: str

    @property
    def text(self) -> str:
        return self.prefix + self.body + self.suffix + self.trailer


def _modifier_glyph(font: GlyphFont, modifier: Modifier) -> str:
    if modifier is Modifier.NONE:
        return ""
    return font.accidental(modifier) or CANONICAL_MODIFIER[modifier]


def _parenthesis_glyph(font: GlyphFont, parenthesis: Parenthesis) -> str:
    if parenthesis is Parenthesis.NONE:
        return ""
    return font.parenthesis(parenthesis) or CANONICAL_PARENTHESIS[parenthesis]


def display_segments(item: FiguredBassItem, font: GlyphFont, style: int = 0) -> DisplaySegments:
    """
    Look up the glyphs for every present field of *item*.

    A PLUS, BACKSLASH or SLASH suffix written right after the digit (no
    parenthesis between) selects the fused digit variant of the font. Any glyph
    the font lacks falls back to the canonical token, so this never fails.
    """
    p = [_parenthesis_glyph(font, paren) for paren in item.parentheses]
    prefix = _modifier_glyph(font, item.prefix)
    suffix = _modifier_glyph(font, item.suffix)

    if item.digit is not None:
        body = ""
        if item.suffix.is_combining and item.parentheses[2] is Parenthesis.NONE:
            body = font.digit(item.digit, style, combined_with=item.suffix)
            if body:
                suffix = ""
        if not body:
            body = font.digit(item.digit, style) or str(item.digit)
        return DisplaySegments(p[0] + prefix + p[1], body, p[2] + suffix + p[3], p[4])

    # no digit: the accidental itself sits in the column
    if item.prefix is not Modifier.NONE:
        return DisplaySegments(p[0], prefix, p[1] + p[2] + suffix + p[3], p[4])
    if item.suffix is not Modifier.NONE:
        return DisplaySegments(p[0] + p[1] + p[2], suffix, p[3], p[4])
    return DisplaySegments(p[0] + p[1], "", p[2] + p[3], p[4])


def display_text(item: FiguredBassItem, font: GlyphFont, style: int = 0) -> str:
    return display_segments(item, font, style).text


def display_text_by_name(
    item: FiguredBassItem,
    registry: GlyphRegistry,
    font_name: str | None,
    style: int = 0,
) -> str:
    """Display text using the named glyph table, or the registry default if it is unknown."""
    return display_text(item, registry.get_or_default(font_name), style)
