"""Timeline queries used to size continuation lines."""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Protocol, Sequence

import numpy as np

from figuredbass.errors import NoForwardBoundaryError

DEFAULT_TICKS_PER_QUARTER = 480


class TimelineContext(Protocol):
    """What StackLayout needs to know about the surrounding score."""

    @property
    def end_tick(self) -> int:
        """Tick at which the piece ends."""

    def next_onset(self, staff: int, tick: int) -> int:
        """
        First note onset on *staff* at or after *tick*.

        Raises:
            NoForwardBoundaryError: If there is none before the end of the piece.
        """

    def next_figured_bass(self, staff: int, tick: int) -> int | None:
        """Tick of the first figured bass on *staff* strictly after *tick*, if any."""

    def x_at(self, tick: int) -> float:
        """Horizontal position of *tick*, in layout units."""


def _sorted_unique(ticks: Iterable[int]) -> list[int]:
    return sorted({int(t) for t in ticks})


@dataclass
class TickTimeline:
    """
    A TimelineContext built from plain tick lists.

    Attributes:
        onsets:         Staff index → ticks at which notes begin on that staff.
        figured_bass:   Staff index → ticks carrying a figured-bass annotation.
        end_tick:       End of the piece.
        units_per_tick: Horizontal distance per tick when no anchors are given.
        anchors:        Optional (tick, x) pairs from an external spacing pass;
                        positions between anchors are interpolated linearly.
    """

    onsets: Mapping[int, Sequence[int]]
    end_tick: int
    figured_bass: Mapping[int, Sequence[int]] = field(default_factory=dict)
    units_per_tick: float = 1.0
    anchors: Sequence[tuple[int, float]] = ()

    def __post_init__(self) -> None:
        self._onsets = {staff: _sorted_unique(ticks) for staff, ticks in self.onsets.items()}
        self._figured_bass = {staff: _sorted_unique(ticks) for staff, ticks in self.figured_bass.items()}
        if self.anchors:
            pairs = sorted(self.anchors)
            self._anchor_ticks = np.array([t for t, _ in pairs], dtype=float)
            self._anchor_xs = np.array([x for _, x in pairs], dtype=float)

    def next_onset(self, staff: int, tick: int) -> int:
        ticks = self._onsets.get(staff, [])
        idx = bisect.bisect_left(ticks, tick)
        if idx < len(ticks) and ticks[idx] < self.end_tick:
            return ticks[idx]
        raise NoForwardBoundaryError(staff, tick)

    def next_figured_bass(self, staff: int, tick: int) -> int | None:
        ticks = self._figured_bass.get(staff, [])
        idx = bisect.bisect_right(ticks, tick)
        return ticks[idx] if idx < len(ticks) else None

    def x_at(self, tick: int) -> float:
        if not self.anchors:
            return tick * self.units_per_tick
        return float(np.interp(tick, self._anchor_ticks, self._anchor_xs))


def timeline_from_music21(
    score: Any,
    *,
    ticks_per_quarter: int = DEFAULT_TICKS_PER_QUARTER,
    figured_bass: Mapping[int, Sequence[int]] | None = None,
    units_per_tick: float = 1.0,
) -> TickTimeline:
    """
    Build a TickTimeline from a music21 score, one staff per part.

    Note and chord offsets (in quarter lengths) become onset ticks; the
    score's highest time becomes the end of the piece.
    """
    from music21 import stream

    parts = list(score.parts) if isinstance(score, stream.Score) else [score]
    onsets: dict[int, list[int]] = {}
    for staff, part in enumerate(parts):
        onsets[staff] = [
            int(round(float(element.offset) * ticks_per_quarter))
            for element in part.flatten().notes
        ]
    end_tick = int(round(float(score.highestTime) * ticks_per_quarter))
    return TickTimeline(
        onsets=onsets,
        end_tick=end_tick,
        figured_bass=dict(figured_bass or {}),
        units_per_tick=units_per_tick,
    )
