"""Unit tests for stack alignment, vertical stacking and continuation-line lengths."""

import pytest

from figuredbass.annotation import parse_annotation
from figuredbass.config import LayoutSettings
from figuredbass.glyph_table import GlyphFont, GlyphRegistry
from figuredbass.layout import StackLayout, align_offsets, continuation_length
from figuredbass.timeline import TickTimeline


def _registry() -> GlyphRegistry:
    font = GlyphFont.from_dict(
        {
            "display_name": "Test",
            "default_pitch": 1.0,
            "default_line_height": 10.0,
            "accidentals": ["", "F", "f", "n", "s", "S", "+", "\\", "/"],
            "parentheses": ["", "(", ")", "[", "]"],
        }
    )
    return GlyphRegistry([font])


def _timeline(onsets: list[int], figured_bass: list[int] | None = None, end: int = 1920) -> TickTimeline:
    return TickTimeline(onsets={0: onsets}, figured_bass={0: figured_bass or []}, end_tick=end)


def test_offsets_pad_narrower_prefixes() -> None:
    assert align_offsets([0, 3, 5]) == [5.0, 2.0, 0.0]


def test_offsets_of_empty_stack() -> None:
    assert align_offsets([]) == []


def test_layout_aligns_digits_across_stack() -> None:
    annotation = parse_annotation("6\n#6\n(#6")
    placement = StackLayout(_registry()).layout(annotation)
    assert [p.prefix_width for p in placement.items] == [0.0, 1.0, 2.0]
    assert placement.offsets == [2.0, 1.0, 0.0]
    assert [p.text for p in placement.items] == ["6", "s6", "(s6"]
    assert [p.width for p in placement.items] == [1.0, 2.0, 3.0]


def test_items_stack_downward_with_top_alignment() -> None:
    placement = StackLayout(_registry()).layout(parse_annotation("6\n4\n3"))
    assert [p.y for p in placement.items] == [0.0, 10.0, 20.0]


def test_items_stack_upward_with_bottom_alignment() -> None:
    settings = LayoutSettings(alignment="bottom", line_height=1.5)
    placement = StackLayout(_registry(), settings=settings).layout(parse_annotation("6\n4"))
    assert [p.y for p in placement.items] == [-30.0, -15.0]


def test_continuation_reaches_next_onset_not_own_duration() -> None:
    annotation = parse_annotation("6_", ticks=480)
    StackLayout(_registry()).layout(annotation, _timeline([0, 960, 1440]))
    assert annotation.line_lengths == [960.0]


def test_continuation_stops_at_next_figured_bass() -> None:
    annotation = parse_annotation("6_", ticks=480)
    StackLayout(_registry()).layout(annotation, _timeline([0, 960], figured_bass=[0, 240]))
    assert annotation.line_lengths == [240.0]


def test_continuation_runs_to_end_of_piece_without_boundary() -> None:
    annotation = parse_annotation("6_", ticks=480)
    StackLayout(_registry()).layout(annotation, _timeline([0], end=1920))
    assert annotation.line_lengths == [1920.0]


def test_continuation_measured_from_annotation_tick() -> None:
    annotation = parse_annotation("5_", ticks=240, tick=960)
    timeline = TickTimeline(onsets={0: [0, 960, 1440]}, end_tick=1920, units_per_tick=0.5)
    assert continuation_length(annotation, timeline) == pytest.approx(240.0)


def test_items_without_line_get_zero() -> None:
    annotation = parse_annotation("6_\n4", ticks=480)
    placement = StackLayout(_registry()).layout(annotation, _timeline([0, 960]))
    assert placement.line_lengths == [960.0, 0.0]
    assert annotation.line_length(1) == 0.0
    assert placement.items[0].extent == 960.0


def test_zero_ticks_gives_no_line() -> None:
    annotation = parse_annotation("6_", ticks=0)
    StackLayout(_registry()).layout(annotation, _timeline([0, 960]))
    assert annotation.line_lengths == [0.0]


def test_no_timeline_gives_no_line() -> None:
    annotation = parse_annotation("6_", ticks=480)
    StackLayout(_registry()).layout(annotation)
    assert annotation.line_lengths == [0.0]


def test_trailer_not_counted_in_width_when_line_present() -> None:
    placement = StackLayout(_registry()).layout(parse_annotation("6_)\n6)"))
    assert [p.width for p in placement.items] == [1.0, 2.0]


def test_unparsed_annotation_lays_out_nothing() -> None:
    annotation = parse_annotation("6\n??", ticks=480)
    annotation.line_lengths = [5.0]
    placement = StackLayout(_registry()).layout(annotation, _timeline([0, 960]))
    assert placement.items == []
    assert annotation.line_lengths == []


def test_unknown_font_uses_default() -> None:
    placement = StackLayout(_registry(), font_name="Missing").layout(parse_annotation("6"))
    assert placement.font == "Test"
