"""GlyphRegistry: read-only collection of figured-bass glyph tables and font metrics."""

from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Final, Iterable, Mapping, Sequence

from figuredbass.errors import ConfigError, UnknownFontError
from figuredbass.symbols import Modifier, Parenthesis

logger = logging.getLogger(__name__)

#: Digit styles: 0 = modern, 1 = historic.
DIGIT_STYLES: Final[int] = 2
DIGIT_COUNT: Final[int] = 10

#: Digit variants, in table order. Variant 0 is the plain digit; the others are
#: the digit fused with a PLUS, BACKSLASH or SLASH suffix.
DIGIT_VARIANTS: Final[tuple[str, ...]] = ("plain", "plus", "backslash", "slash")

_VARIANT_FOR_SUFFIX: Final[Mapping[Modifier, int]] = {
    Modifier.PLUS: 1,
    Modifier.BACKSLASH: 2,
    Modifier.SLASH: 3,
}


def glyph_count(text: str) -> int:
    """Number of glyphs that take horizontal space; combining marks overlay the previous glyph."""
    return sum(1 for ch in text if not unicodedata.combining(ch))


def _padded(values: Sequence[Any] | None, size: int) -> tuple[str, ...]:
    items = [str(v) if v is not None else "" for v in (values or [])][:size]
    return tuple(items + [""] * (size - len(items)))


@dataclass(frozen=True)
class GlyphFont:
    """
    One glyph table, as described by a font-config entry.

    Attributes:
        family:              Font family the glyphs are drawn with.
        display_name:        Name the table is registered and looked up under.
        default_pitch:       Horizontal advance of one glyph, in layout units.
        default_line_height: Vertical distance between stacked items.
        accidentals:         Glyph per Modifier value (index 0 = none).
        parentheses:         Glyph per Parenthesis value (index 0 = none).
        digits:              ``digits[style][digit][variant]`` glyph strings.

    Empty strings mark glyphs the font does not provide.
    """

    family: str
    display_name: str
    default_pitch: float
    default_line_height: float
    accidentals: tuple[str, ...]
    parentheses: tuple[str, ...]
    digits: tuple[tuple[tuple[str, ...], ...], ...]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GlyphFont:
        """
        Build a table from one ``fonts`` entry of the configuration.

        ``digits`` is a list of up to two styles, each mapping a variant name
        (``plain``, ``plus``, ``backslash``, ``slash``) to ten glyph strings.
        A missing historic style reuses the modern one.

        Raises:
            ConfigError: If the entry has no name, non-numeric metrics or a
                malformed ``digits`` list.
        """
        name = data.get("display_name") or data.get("family")
        if not name:
            raise ConfigError("Font entry needs a 'display_name' or 'family'.")
        try:
            pitch = float(data.get("default_pitch", 1.0))
            line_height = float(data.get("default_line_height", 1.0))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Font {name!r} has invalid metrics: {exc}") from exc

        styles_raw = data.get("digits") or []
        if not isinstance(styles_raw, list):
            raise ConfigError(f"Font {name!r}: 'digits' must be a list of styles.")
        styles_raw = styles_raw[:DIGIT_STYLES]
        for style in styles_raw:
            if not isinstance(style, Mapping):
                raise ConfigError(f"Font {name!r}: each digit style must map variant names to glyph lists.")
        if not styles_raw:
            styles_raw = [{"plain": [str(d) for d in range(DIGIT_COUNT)]}]
        while len(styles_raw) < DIGIT_STYLES:
            styles_raw.append(styles_raw[0])

        digits = []
        for style in styles_raw:
            columns = [_padded(style.get(variant), DIGIT_COUNT) for variant in DIGIT_VARIANTS]
            digits.append(tuple(tuple(col[d] for col in columns) for d in range(DIGIT_COUNT)))

        return cls(
            family=str(data.get("family", name)),
            display_name=str(name),
            default_pitch=pitch,
            default_line_height=line_height,
            accidentals=_padded(data.get("accidentals"), len(Modifier)),
            parentheses=_padded(data.get("parentheses"), len(Parenthesis)),
            digits=tuple(digits),
        )

    # ------------------------------------------------------------------
    # Glyph lookups; an empty string means "not provided by this font"
    # ------------------------------------------------------------------

    def accidental(self, modifier: Modifier) -> str:
        return self.accidentals[modifier]

    def parenthesis(self, parenthesis: Parenthesis) -> str:
        return self.parentheses[parenthesis]

    def digit(self, digit: int, style: int = 0, combined_with: Modifier = Modifier.NONE) -> str:
        variant = _VARIANT_FOR_SUFFIX.get(combined_with, 0)
        style = style if 0 <= style < DIGIT_STYLES else 0
        return self.digits[style][digit][variant]

    def text_width(self, text: str) -> float:
        return glyph_count(text) * self.default_pitch


class GlyphRegistry:
    """
    Ordered, read-only set of glyph tables.

    Built once from configuration and then handed to every component that
    needs glyph lookups. Nothing mutates it afterwards, so a single instance
    can be shared freely.
    """

    def __init__(self, fonts: Iterable[GlyphFont], default: str | None = None) -> None:
        ordered: dict[str, GlyphFont] = {}
        for font in fonts:
            ordered[font.display_name] = font
        if not ordered:
            raise ConfigError("At least one figured bass font is required.")
        self._fonts: Mapping[str, GlyphFont] = MappingProxyType(ordered)
        self._names: tuple[str, ...] = tuple(ordered)
        if default is None:
            default = self._names[0]
        if default not in self._fonts:
            raise ConfigError(f"Default font {default!r} is not among the configured fonts.")
        self._default = default

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> GlyphRegistry:
        entries = config.get("fonts") or []
        if not isinstance(entries, list):
            raise ConfigError("'fonts' must be a list of font definitions.")
        return cls((GlyphFont.from_dict(entry) for entry in entries), default=config.get("default_font"))

    @property
    def default_name(self) -> str:
        return self._default

    @property
    def default(self) -> GlyphFont:
        return self._fonts[self._default]

    def names(self) -> list[str]:
        return list(self._names)

    def get(self, name: str) -> GlyphFont:
        """
        Return the table registered under *name*.

        Raises:
            UnknownFontError: If no table has that name.
        """
        try:
            return self._fonts[name]
        except KeyError:
            raise UnknownFontError(name) from None

    def get_or_default(self, name: str | None) -> GlyphFont:
        """Return the named table, falling back to the default one for unknown names."""
        if name is None:
            return self.default
        try:
            return self.get(name)
        except UnknownFontError as exc:
            logger.warning("%s; using %r instead", exc, self._default)
            return self.default

    def font_data(self, index: int) -> GlyphFont | None:
        """Table at position *index* in configuration order, or None when out of range."""
        if 0 <= index < len(self._names):
            return self._fonts[self._names[index]]
        return None

    def __contains__(self, name: object) -> bool:
        return name in self._fonts

    def __len__(self) -> int:
        return len(self._names)
