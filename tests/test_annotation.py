"""Unit tests for multi-line parsing, the literal-text fallback and field edits."""

import pytest

from figuredbass.annotation import ItemField, get_item_field, parse_annotation, reparse, set_item_field
from figuredbass.errors import MalformedTokenError
from figuredbass.interchange import FiguredBassRecord, ItemRecord, from_record
from figuredbass.symbols import Modifier, Parenthesis


def test_multi_line_annotation() -> None:
    annotation = parse_annotation("6\n4", ticks=480)
    assert annotation.is_parsed
    assert [item.order for item in annotation.items] == [0, 1]
    assert [item.digit for item in annotation.items] == [6, 4]
    assert annotation.normalized_text == "6\n4"
    assert annotation.ticks == 480


def test_windows_line_breaks() -> None:
    annotation = parse_annotation("6\r\n4")
    assert [item.digit for item in annotation.items] == [6, 4]


def test_normalized_text_uses_canonical_spellings() -> None:
    annotation = parse_annotation("x6-\nn")
    assert annotation.normalized_text == "##6_\nh"


def test_one_bad_line_drops_whole_annotation() -> None:
    raw = "6\n#+x\n3"
    annotation = parse_annotation(raw)
    assert annotation.items == []
    assert not annotation.is_parsed
    assert annotation.raw_text == raw
    assert annotation.normalized_text is None


def test_empty_text_is_not_parsed() -> None:
    annotation = parse_annotation("")
    assert not annotation.is_parsed
    assert annotation.raw_text == ""


def test_blank_line_in_the_middle_fails() -> None:
    assert not parse_annotation("6\n\n4").is_parsed


def test_reparse_replaces_items_wholesale() -> None:
    annotation = parse_annotation("6\n4")
    annotation.line_lengths = [10.0, 10.0]

    assert reparse(annotation, "5") is True
    assert [item.digit for item in annotation.items] == [5]
    assert annotation.line_lengths == []

    assert reparse(annotation, "5\n6?") is False
    assert annotation.items == []
    assert annotation.raw_text == "5\n6?"


def test_set_ticks_clears_line_lengths() -> None:
    annotation = parse_annotation("6_", ticks=480)
    annotation.line_lengths = [96.0]
    annotation.set_ticks(960)
    assert annotation.ticks == 960
    assert annotation.line_lengths == []
    assert annotation.line_length(0) == 0.0


def test_item_lookup_by_order() -> None:
    annotation = parse_annotation("6\n4")
    assert annotation.item(1).digit == 4
    with pytest.raises(IndexError):
        annotation.item(5)


def test_set_item_field_rewrites_text() -> None:
    annotation = parse_annotation("6\n4")
    item = set_item_field(annotation, 1, ItemField.SUFFIX, Modifier.SHARP)
    assert item.digit == 4
    assert item.suffix is Modifier.SHARP
    assert annotation.raw_text == "6\n4#"
    assert annotation.normalized_text == "6\n4#"


def test_set_item_field_parenthesis_and_line() -> None:
    annotation = parse_annotation("6")
    set_item_field(annotation, 0, ItemField.PARENTHESIS2, Parenthesis.ROUND_OPEN)
    set_item_field(annotation, 0, ItemField.PARENTHESIS3, Parenthesis.ROUND_CLOSED)
    item = set_item_field(annotation, 0, ItemField.CONTINUATION_LINE, True)
    assert annotation.raw_text == "(6)_"
    assert get_item_field(item, ItemField.PARENTHESIS2) is Parenthesis.ROUND_OPEN
    assert get_item_field(item, ItemField.CONTINUATION_LINE) is True
    assert get_item_field(item, ItemField.DIGIT) == 6


def test_set_item_field_rejects_invalid_prefix() -> None:
    annotation = parse_annotation("6")
    with pytest.raises(MalformedTokenError):
        set_item_field(annotation, 0, ItemField.PREFIX, Modifier.PLUS)
    assert annotation.raw_text == "6"


def test_set_item_field_rejects_digit_out_of_range() -> None:
    annotation = parse_annotation("6")
    with pytest.raises(ValueError):
        set_item_field(annotation, 0, ItemField.DIGIT, 12)


def test_set_item_field_on_unparsed_annotation() -> None:
    annotation = parse_annotation("oops")
    with pytest.raises(ValueError):
        set_item_field(annotation, 0, ItemField.DIGIT, 5)


def test_has_parentheses() -> None:
    assert parse_annotation("6\n(4)").has_parentheses
    assert not parse_annotation("6\n4").has_parentheses


def test_set_item_field_rejects_bracket_that_would_move() -> None:
    annotation = parse_annotation("6")
    with pytest.raises(ValueError):
        set_item_field(annotation, 0, ItemField.PARENTHESIS1, Parenthesis.ROUND_OPEN)
    assert annotation.raw_text == "6"
    assert annotation.items[0].parentheses == (Parenthesis.NONE,) * 5


def test_set_item_field_rejects_suffix_without_digit() -> None:
    annotation = parse_annotation("_")
    with pytest.raises(ValueError):
        set_item_field(annotation, 0, ItemField.SUFFIX, Modifier.SHARP)
    assert annotation.raw_text == "_"


def test_set_item_field_stores_bracket_after_prefix() -> None:
    annotation = parse_annotation("#6")
    item = set_item_field(annotation, 0, ItemField.PARENTHESIS1, Parenthesis.ROUND_OPEN)
    assert get_item_field(item, ItemField.PARENTHESIS1) is Parenthesis.ROUND_OPEN
    assert annotation.raw_text == "(#6"


def test_set_item_field_keeps_brackets_of_a_restored_record() -> None:
    record = FiguredBassRecord(ticks=0, on_note=True, items=[ItemRecord(0, 6, 0, False, 1, 0, 2, 0, 0)])
    annotation = from_record(record)
    before = annotation.items[0].parentheses
    assert before == (Parenthesis.NONE, Parenthesis.ROUND_OPEN, Parenthesis.ROUND_CLOSED, Parenthesis.NONE, Parenthesis.NONE)

    item = set_item_field(annotation, 0, ItemField.CONTINUATION_LINE, True)
    assert item.parentheses == before
    assert annotation.raw_text == "(6)_"
