"""figuredbass: parse, normalize, display and lay out figured-bass annotations."""

from figuredbass.annotation import ItemField, parse_annotation, reparse, set_item_field
from figuredbass.glyph_table import GlyphFont, GlyphRegistry
from figuredbass.item_encoder import canonical_text, display_text
from figuredbass.item_parser import ItemParser
from figuredbass.layout import StackLayout, StackPlacement
from figuredbass.models import FiguredBass, FiguredBassItem
from figuredbass.symbols import Modifier, Parenthesis

__version__ = "0.1.0"

__all__ = [
    "FiguredBass",
    "FiguredBassItem",
    "GlyphFont",
    "GlyphRegistry",
    "ItemField",
    "ItemParser",
    "Modifier",
    "Parenthesis",
    "StackLayout",
    "StackPlacement",
    "canonical_text",
    "display_text",
    "parse_annotation",
    "reparse",
    "set_item_field",
]
