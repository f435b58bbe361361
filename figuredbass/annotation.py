"""Annotation-level parsing with all-or-nothing fallback, plus the typed field-edit surface."""

from __future__ import annotations

import dataclasses
import logging
from enum import Enum
from typing import Any

from figuredbass.errors import EmptyItemError, ParseError
from figuredbass.item_parser import DEFAULT_PARSER, ItemParser
from figuredbass.models import FiguredBass, FiguredBassItem
from figuredbass.symbols import Modifier, Parenthesis

logger = logging.getLogger(__name__)


def parse_items(raw: str, parser: ItemParser | None = None) -> list[FiguredBassItem]:
    """
    Parse every line of *raw* into an item.

    Raises:
        ParseError: On the first line that does not parse; no partial list is returned.
    """
    parser = parser or DEFAULT_PARSER
    lines = raw.splitlines()
    if not lines:
        raise EmptyItemError("Annotation is empty", raw)
    return [parser.parse(line, order) for order, line in enumerate(lines)]


def reparse(annotation: FiguredBass, raw: str, parser: ItemParser | None = None) -> bool:
    """
    Replace the items of *annotation* with the parse of *raw*.

    On failure the annotation drops to the literal-text state: no items, and
    ``raw_text`` holds *raw* unchanged.

    Returns:
        True if every line parsed.
    """
    annotation.raw_text = raw
    try:
        items = parse_items(raw, parser)
    except ParseError as exc:
        logger.debug("Keeping figured bass as plain text: %s", exc)
        items = []
    annotation.items = items
    annotation.line_lengths = []
    return annotation.is_parsed


def parse_annotation(
    raw: str,
    *,
    on_note: bool = True,
    ticks: int = 0,
    tick: int = 0,
    staff: int = 0,
    parser: ItemParser | None = None,
) -> FiguredBass:
    """Create a FiguredBass from multi-line input, falling back to literal text on any error."""
    annotation = FiguredBass(raw_text=raw, on_note=on_note, ticks=ticks, tick=tick, staff=staff)
    reparse(annotation, raw, parser)
    return annotation


# ── Field edits ──────────────────────────────────────────────────────────────

class ItemField(Enum):
    """Item properties an external command or undo stack may set."""

    PREFIX = "prefix"
    DIGIT = "digit"
    SUFFIX = "suffix"
    CONTINUATION_LINE = "continuationLine"
    PARENTHESIS1 = "parenthesis1"
    PARENTHESIS2 = "parenthesis2"
    PARENTHESIS3 = "parenthesis3"
    PARENTHESIS4 = "parenthesis4"
    PARENTHESIS5 = "parenthesis5"


_PARENTHESIS_FIELDS = (
    ItemField.PARENTHESIS1,
    ItemField.PARENTHESIS2,
    ItemField.PARENTHESIS3,
    ItemField.PARENTHESIS4,
    ItemField.PARENTHESIS5,
)


def _changes(item: FiguredBassItem, field: ItemField, value: Any) -> dict[str, Any]:
    if field is ItemField.PREFIX:
        return {"prefix": Modifier(value)}
    if field is ItemField.SUFFIX:
        return {"suffix": Modifier(value)}
    if field is ItemField.DIGIT:
        return {"digit": None if value is None else int(value)}
    if field is ItemField.CONTINUATION_LINE:
        return {"continuation_line": bool(value)}
    slot = _PARENTHESIS_FIELDS.index(field)
    parentheses = list(item.parentheses)
    parentheses[slot] = Parenthesis(value)
    return {"parentheses": tuple(parentheses)}


def _requested_value(field: ItemField, changes: dict[str, Any]) -> Any:
    if field in _PARENTHESIS_FIELDS:
        return changes["parentheses"][_PARENTHESIS_FIELDS.index(field)]
    return next(iter(changes.values()))


def get_item_field(item: FiguredBassItem, field: ItemField) -> Any:
    if field in _PARENTHESIS_FIELDS:
        return item.parentheses[_PARENTHESIS_FIELDS.index(field)]
    attribute = "continuation_line" if field is ItemField.CONTINUATION_LINE else field.value
    return getattr(item, attribute)


def set_item_field(
    annotation: FiguredBass,
    order: int,
    field: ItemField,
    value: Any,
    parser: ItemParser | None = None,
) -> FiguredBassItem:
    """
    Set one property of the item with the given order.

    The edited stack is written back as normalized text and re-read, so the
    annotation always holds exactly what its text parses to. Other brackets
    may settle into neighbouring slots, but the edited field itself must keep
    the new value.

    Returns:
        The item now stored under *order*.

    Raises:
        ValueError: If the annotation is in the literal-text state, the new
            value makes the item invalid (a ParseError subclass), or the item
            cannot hold the value in that field (a bracket next to an empty
            slot, or a suffix without a digit, settles elsewhere).
        IndexError: If no item has that order.
    """
    if not annotation.is_parsed:
        raise ValueError("Cannot edit items of an annotation that did not parse")
    current = annotation.item(order)
    changes = _changes(current, field, value)
    updated = dataclasses.replace(current, **changes)
    requested = _requested_value(field, changes)
    if get_item_field(updated, field) != requested:
        raise ValueError(
            f"{field.value} cannot hold {requested!r} in {current.normalized_text!r}; "
            f"the item would read {updated.normalized_text!r}"
        )
    stack = [updated if item.order == order else item for item in annotation.items]
    text = "\n".join(item.normalized_text for item in stack)

    items = parse_items(text, parser)
    annotation.raw_text = text
    annotation.replace_items(items)
    return annotation.item(order)
