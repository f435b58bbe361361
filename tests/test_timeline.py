"""Unit tests for the tick-list timeline and the music21 adaptor."""

import pytest

from figuredbass.errors import NoForwardBoundaryError
from figuredbass.timeline import TickTimeline, timeline_from_music21


def _timeline() -> TickTimeline:
    return TickTimeline(
        onsets={0: [960, 0, 480, 480]},
        figured_bass={0: [0, 720]},
        end_tick=1920,
    )


def test_next_onset_includes_the_tick_itself() -> None:
    timeline = _timeline()
    assert timeline.next_onset(0, 480) == 480
    assert timeline.next_onset(0, 481) == 960


def test_next_onset_past_last_note_raises() -> None:
    with pytest.raises(NoForwardBoundaryError) as info:
        _timeline().next_onset(0, 961)
    assert info.value.tick == 961
    assert isinstance(info.value, LookupError)


def test_unknown_staff_has_no_onsets() -> None:
    with pytest.raises(NoForwardBoundaryError):
        _timeline().next_onset(3, 0)


def test_next_figured_bass_is_strictly_after() -> None:
    timeline = _timeline()
    assert timeline.next_figured_bass(0, 0) == 720
    assert timeline.next_figured_bass(0, 720) is None
    assert timeline.next_figured_bass(1, 0) is None


def test_linear_positions() -> None:
    timeline = TickTimeline(onsets={}, end_tick=960, units_per_tick=0.25)
    assert timeline.x_at(480) == 120.0


def test_anchor_positions_are_interpolated() -> None:
    timeline = TickTimeline(onsets={}, end_tick=1920, anchors=[(960, 150.0), (0, 0.0), (1920, 200.0)])
    assert timeline.x_at(480) == pytest.approx(75.0)
    assert timeline.x_at(1440) == pytest.approx(175.0)


# ---------------------------------------------------------------------------
# Integration tests: require music21 installed.
# ---------------------------------------------------------------------------

@pytest.mark.integration
def test_timeline_from_music21_score() -> None:
    pytest.importorskip("music21")
    from music21 import note, stream

    part = stream.Part()
    part.append(note.Note("C3", quarterLength=2))
    part.append(note.Note("D3", quarterLength=1))
    score = stream.Score([part])

    timeline = timeline_from_music21(score, figured_bass={0: [0]})
    assert timeline.end_tick == 1440
    assert timeline.next_onset(0, 1) == 960
    assert timeline.next_figured_bass(0, -1) == 0
