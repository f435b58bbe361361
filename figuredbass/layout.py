"""StackLayout: aligns the items of one figured bass and sizes their continuation lines."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from figuredbass.config import LayoutSettings
from figuredbass.errors import NoForwardBoundaryError
from figuredbass.glyph_table import GlyphFont, GlyphRegistry
from figuredbass.item_encoder import DisplaySegments, display_segments
from figuredbass.models import FiguredBass
from figuredbass.timeline import TimelineContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemPlacement:
    """
    Everything a renderer needs to draw one item.

    Attributes:
        order:        Item order within the stack.
        segments:     Display glyphs split around the alignment column.
        width:        Width of the glyphs drawn at the anchor (a trailer that
                      sits at the end of a continuation line is not counted).
        prefix_width: Width of the glyphs left of the alignment column.
        x_offset:     Horizontal shift that lines the column up across the stack.
        y:            Vertical position relative to the annotation anchor.
        line_length:  Continuation-line length, 0 when the item has none.
    """

    order: int
    segments: DisplaySegments
    width: float
    prefix_width: float
    x_offset: float
    y: float
    line_length: float

    @property
    def text(self) -> str:
        return self.segments.text

    @property
    def extent(self) -> float:
        """Horizontal space taken, including the continuation line."""
        return max(self.x_offset + self.width, self.line_length)


@dataclass(frozen=True)
class StackPlacement:
    """Layout result for a whole FiguredBass."""

    font: str
    items: list[ItemPlacement] = field(default_factory=list)

    @property
    def offsets(self) -> list[float]:
        return [p.x_offset for p in self.items]

    @property
    def line_lengths(self) -> list[float]:
        return [p.line_length for p in self.items]


def align_offsets(prefix_widths: Sequence[float]) -> list[float]:
    """Offset per item so every alignment column lands under the widest prefix."""
    if len(prefix_widths) == 0:
        return []
    widths = np.asarray(prefix_widths, dtype=float)
    return (widths.max() - widths).tolist()


def continuation_length(annotation: FiguredBass, timeline: TimelineContext | None) -> float:
    """
    Horizontal extent of the annotation's continuation lines.

    The search for the end starts ``ticks`` after the annotation: the first
    onset found there ends the line, unless another figured bass on the same
    staff comes earlier. With no onset left the line runs to the end of the piece.
    """
    if annotation.ticks <= 0 or timeline is None:
        return 0.0

    start = annotation.tick
    try:
        boundary = timeline.next_onset(annotation.staff, start + annotation.ticks)
    except NoForwardBoundaryError as exc:
        logger.info("%s; extending continuation line to the end of the piece", exc)
        boundary = timeline.end_tick

    following = timeline.next_figured_bass(annotation.staff, start)
    if following is not None and following < boundary:
        boundary = following

    return max(0.0, timeline.x_at(boundary) - timeline.x_at(start))


class StackLayout:
    """
    Computes per-item placement for a FiguredBass.

    Algorithm overview
    ------------------
    1. **Glyphs** – each item's display segments come from the active glyph
       table; widths are glyph counts times the font pitch.

    2. **Alignment** – the widest prefix segment in the stack sets the column;
       every other item is shifted right by the difference.

    3. **Stacking** – items are placed one line height apart, downward from
       the first item (top alignment) or upward from the last (bottom).

    4. **Continuation lines** – one length for the whole annotation, resolved
       against the timeline and given to every item that has a line.
    """

    def __init__(
        self,
        registry: GlyphRegistry,
        font_name: str | None = None,
        settings: LayoutSettings | None = None,
    ) -> None:
        self.registry = registry
        self.font_name = font_name
        self.settings = settings or LayoutSettings()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _font(self) -> GlyphFont:
        return self.registry.get_or_default(self.font_name)

    def _vertical_positions(self, count: int, font: GlyphFont) -> np.ndarray:
        line_height = font.default_line_height * self.settings.line_height
        rows = np.arange(count, dtype=float)
        if self.settings.alignment == "top":
            return rows * line_height
        return -line_height * (count - rows)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def layout(self, annotation: FiguredBass, timeline: TimelineContext | None = None) -> StackPlacement:
        """
        Lay out *annotation* and store its continuation-line lengths.

        An annotation left in the literal-text state has nothing to lay out:
        the result is empty and ``line_lengths`` is cleared.
        """
        font = self._font()
        if not annotation.is_parsed:
            annotation.line_lengths = []
            return StackPlacement(font=font.display_name)

        style = self.settings.style
        segments = [display_segments(item, font, style) for item in annotation.items]
        # the trailer is drawn at the end of the continuation line, if there is one
        widths = [
            font.text_width(s.prefix + s.body + s.suffix if item.continuation_line else s.text)
            for item, s in zip(annotation.items, segments)
        ]
        prefix_widths = [font.text_width(s.prefix) for s in segments]
        offsets = align_offsets(prefix_widths)
        ys = self._vertical_positions(len(segments), font)

        length = continuation_length(annotation, timeline)
        line_lengths = [length if item.continuation_line else 0.0 for item in annotation.items]
        annotation.line_lengths = line_lengths

        placements = [
            ItemPlacement(
                order=item.order,
                segments=seg,
                width=width,
                prefix_width=prefix_width,
                x_offset=offset,
                y=float(y),
                line_length=line_length,
            )
            for item, seg, width, prefix_width, offset, y, line_length in zip(
                annotation.items, segments, widths, prefix_widths, offsets, ys, line_lengths
            )
        ]
        return StackPlacement(font=font.display_name, items=placements)
