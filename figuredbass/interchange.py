"""Interchange: field-level records and the MusicXML <figured-bass> element."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Final, Mapping
from xml.etree import ElementTree as ET

from figuredbass.annotation import parse_annotation
from figuredbass.errors import MalformedTokenError, ParseError
from figuredbass.item_parser import ItemParser
from figuredbass.models import FiguredBass, FiguredBassItem
from figuredbass.symbols import CANONICAL_CONTINUATION, CANONICAL_MODIFIER, Modifier
from figuredbass.timeline import DEFAULT_TICKS_PER_QUARTER

#: Digit value used in records for "no digit".
NO_DIGIT: Final[int] = -1


@dataclass(frozen=True)
class ItemRecord:
    """One item as exchanged with file I/O: four fields, then the five parentheses."""

    prefix: int
    digit: int
    suffix: int
    continuation_line: bool
    parenthesis1: int = 0
    parenthesis2: int = 0
    parenthesis3: int = 0
    parenthesis4: int = 0
    parenthesis5: int = 0


@dataclass(frozen=True)
class FiguredBassRecord:
    """A whole annotation as exchanged with file I/O."""

    ticks: int
    on_note: bool
    items: list[ItemRecord]


def item_to_record(item: FiguredBassItem) -> ItemRecord:
    return ItemRecord(
        int(item.prefix),
        NO_DIGIT if item.digit is None else item.digit,
        int(item.suffix),
        item.continuation_line,
        *(int(p) for p in item.parentheses),
    )


def item_from_record(record: ItemRecord, order: int) -> FiguredBassItem:
    """
    Raises:
        ParseError: If the record describes an invalid item.
    """
    try:
        return FiguredBassItem(
            order=order,
            prefix=Modifier(record.prefix),
            digit=None if record.digit == NO_DIGIT else int(record.digit),
            suffix=Modifier(record.suffix),
            continuation_line=record.continuation_line,
            parentheses=(
                record.parenthesis1,
                record.parenthesis2,
                record.parenthesis3,
                record.parenthesis4,
                record.parenthesis5,
            ),
        )
    except ParseError:
        raise
    except (TypeError, ValueError) as exc:
        raise MalformedTokenError(f"Invalid item record {record!r}: {exc}") from exc


def to_record(annotation: FiguredBass) -> FiguredBassRecord:
    return FiguredBassRecord(
        ticks=annotation.ticks,
        on_note=annotation.on_note,
        items=[item_to_record(item) for item in annotation.items],
    )


def from_record(record: FiguredBassRecord, *, tick: int = 0, staff: int = 0) -> FiguredBass:
    """
    Rebuild an annotation from its record; the text is regenerated from the items.

    Raises:
        ParseError: If any item record is invalid.
    """
    items = [item_from_record(r, order) for order, r in enumerate(record.items)]
    annotation = FiguredBass(on_note=record.on_note, ticks=record.ticks, tick=tick, staff=staff)
    annotation.replace_items(items)
    annotation.raw_text = annotation.normalized_text or ""
    return annotation


def to_json(annotation: FiguredBass) -> str:
    return json.dumps(asdict(to_record(annotation)), separators=(",", ":"))


def record_from_mapping(data: Mapping[str, Any]) -> FiguredBassRecord:
    """
    Raises:
        ParseError: If a key is missing or unknown, or a value has the wrong type.
    """
    try:
        return FiguredBassRecord(
            ticks=int(data["ticks"]),
            on_note=bool(data["on_note"]),
            items=[ItemRecord(**entry) for entry in data["items"]],
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedTokenError(f"Invalid figured bass record: {exc!r}") from exc


def from_json(payload: str) -> FiguredBass:
    """
    Raises:
        json.JSONDecodeError: If *payload* is not JSON.
        ParseError: If the decoded record is invalid.
    """
    return from_record(record_from_mapping(json.loads(payload)))


# ── MusicXML ─────────────────────────────────────────────────────────────────

MUSICXML_MODIFIER: Final[Mapping[Modifier, str]] = {
    Modifier.DOUBLE_FLAT: "flat-flat",
    Modifier.FLAT: "flat",
    Modifier.NATURAL: "natural",
    Modifier.SHARP: "sharp",
    Modifier.DOUBLE_SHARP: "double-sharp",
    Modifier.PLUS: "cross",
    Modifier.BACKSLASH: "backslash",
    Modifier.SLASH: "slash",
}

_MODIFIER_FROM_MUSICXML: Final[Mapping[str, Modifier]] = {
    **{name: modifier for modifier, name in MUSICXML_MODIFIER.items()},
    "sharp-sharp": Modifier.DOUBLE_SHARP,
    "back-slash": Modifier.BACKSLASH,
}


def _local(tag: str) -> str:
    return tag.split("}")[-1] if "}" in tag else tag


def _child(elem: ET.Element, name: str) -> ET.Element | None:
    for child in elem:
        if _local(child.tag) == name:
            return child
    return None


def _children(elem: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in elem if _local(child.tag) == name]


def ticks_to_divisions(ticks: int, divisions: int, ticks_per_quarter: int = DEFAULT_TICKS_PER_QUARTER) -> int:
    return int(round(ticks * divisions / ticks_per_quarter))


def divisions_to_ticks(duration: int, divisions: int, ticks_per_quarter: int = DEFAULT_TICKS_PER_QUARTER) -> int:
    if divisions <= 0:
        divisions = ticks_per_quarter
    return int(round(duration * (ticks_per_quarter / divisions)))


def to_musicxml(
    annotation: FiguredBass,
    divisions: int,
    ticks_per_quarter: int = DEFAULT_TICKS_PER_QUARTER,
) -> ET.Element:
    """
    Write *annotation* as a ``<figured-bass>`` element.

    Only the presence of brackets survives, as ``parentheses="yes"``; which
    bracket was used and where it stood is lost.

    Raises:
        ValueError: If the annotation is in the literal-text state.
    """
    if not annotation.is_parsed:
        raise ValueError("Only parsed figured bass can be written as MusicXML")

    root = ET.Element("figured-bass")
    if annotation.has_parentheses:
        root.set("parentheses", "yes")
    for item in annotation.items:
        figure = ET.SubElement(root, "figure")
        if item.prefix is not Modifier.NONE:
            ET.SubElement(figure, "prefix").text = MUSICXML_MODIFIER[item.prefix]
        if item.digit is not None:
            ET.SubElement(figure, "figure-number").text = str(item.digit)
        if item.suffix is not Modifier.NONE:
            ET.SubElement(figure, "suffix").text = MUSICXML_MODIFIER[item.suffix]
        if item.continuation_line:
            ET.SubElement(figure, "extend", {"type": "start"})
    if annotation.ticks > 0:
        duration = ticks_to_divisions(annotation.ticks, divisions, ticks_per_quarter)
        ET.SubElement(root, "duration").text = str(duration)
    return root


def _figure_text(figure: ET.Element, parenthesized: bool) -> str:
    parts: list[str] = []
    for name in ("prefix", "figure-number", "suffix"):
        node = _child(figure, name)
        value = (node.text or "").strip() if node is not None else ""
        if not value:
            continue
        if name == "figure-number":
            parts.append(value)
        else:
            # unknown names are kept so the line fails to parse as a whole
            modifier = _MODIFIER_FROM_MUSICXML.get(value)
            parts.append(CANONICAL_MODIFIER[modifier] if modifier is not None else value)
    extend = _child(figure, "extend")
    if extend is not None and extend.get("type", "start") != "stop":
        parts.append(CANONICAL_CONTINUATION)
    text = "".join(parts)
    return f"({text})" if parenthesized else text


def from_musicxml(
    element: ET.Element,
    divisions: int,
    *,
    ticks_per_quarter: int = DEFAULT_TICKS_PER_QUARTER,
    on_note: bool = True,
    tick: int = 0,
    staff: int = 0,
    parser: ItemParser | None = None,
) -> FiguredBass:
    """
    Read a ``<figured-bass>`` element.

    Each ``<figure>`` is turned into one line of input text and the whole
    text goes through the normal parse, so an unreadable figure leaves the
    annotation as literal text like any other bad input.
    """
    parenthesized = element.get("parentheses", "no") == "yes"
    lines = [_figure_text(figure, parenthesized) for figure in _children(element, "figure")]

    ticks = 0
    duration = _child(element, "duration")
    if duration is not None and duration.text and duration.text.strip().isdigit():
        ticks = divisions_to_ticks(int(duration.text.strip()), divisions, ticks_per_quarter)

    return parse_annotation(
        "\n".join(lines),
        on_note=on_note,
        ticks=ticks,
        tick=tick,
        staff=staff,
        parser=parser,
    )


def musicxml_string(element: ET.Element) -> str:
    ET.indent(element)
    return ET.tostring(element, encoding="unicode")
