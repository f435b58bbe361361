"""Data models for figured-bass annotations and their items."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from figuredbass.errors import EmptyItemError, MalformedTokenError
from figuredbass.item_encoder import canonical_text
from figuredbass.symbols import NO_PARENTHESES, PARENTHESIS_SLOTS, Modifier, Parenthesis

MAX_DIGIT = 9

# token kind accepted by each slot, left to right
_SLOT_KINDS = ("paren", "modifier", "paren", "digit", "paren", "modifier", "paren", "line", "paren")


def _shift_parentheses(
    parens: list[Parenthesis],
    prefix: Modifier,
    digit: int | None,
    suffix: Modifier,
    continuation_line: bool,
) -> None:
    """Move brackets that surround an empty slot one step toward the digit."""
    if prefix is Modifier.NONE and parens[1] is Parenthesis.NONE:
        parens[1], parens[0] = parens[0], Parenthesis.NONE
    if digit is None and parens[2] is Parenthesis.NONE:
        parens[2], parens[1] = parens[1], Parenthesis.NONE
    if not continuation_line and parens[3] is Parenthesis.NONE:
        parens[3], parens[4] = parens[4], Parenthesis.NONE
    if suffix is Modifier.NONE and parens[2] is Parenthesis.NONE:
        parens[2], parens[3] = parens[3], Parenthesis.NONE


def settle_slots(
    prefix: Modifier,
    digit: int | None,
    suffix: Modifier,
    continuation_line: bool,
    parentheses: Sequence[Parenthesis],
) -> tuple[Modifier, Modifier, tuple[Parenthesis, ...]]:
    """
    Put every token in the slot a left-to-right read of its text would give it.

    The tokens keep their order; each one moves to the earliest slot of its
    kind, then brackets around empty slots shift toward the digit. The lone
    accidental of a digitless item becomes the prefix unless two brackets
    stand before it.

    Returns:
        ``(prefix, suffix, parentheses)``; digit and continuation line never move.
    """
    p = parentheses
    present = [
        ("paren", p[0]) if p[0] is not Parenthesis.NONE else None,
        ("modifier", prefix) if prefix is not Modifier.NONE else None,
        ("paren", p[1]) if p[1] is not Parenthesis.NONE else None,
        ("digit", digit) if digit is not None else None,
        ("paren", p[2]) if p[2] is not Parenthesis.NONE else None,
        ("modifier", suffix) if suffix is not Modifier.NONE else None,
        ("paren", p[3]) if p[3] is not Parenthesis.NONE else None,
        ("line", True) if continuation_line else None,
        ("paren", p[4]) if p[4] is not Parenthesis.NONE else None,
    ]
    tokens = [token for token in present if token is not None]

    slots: list[Any] = [None] * len(_SLOT_KINDS)
    position = 0
    for index, kind in enumerate(_SLOT_KINDS):
        if position < len(tokens) and tokens[position][0] == kind:
            slots[index] = tokens[position][1]
            position += 1

    parens = [slots[i] or Parenthesis.NONE for i in (0, 2, 4, 6, 8)]
    prefix = slots[1] or Modifier.NONE
    suffix = slots[5] or Modifier.NONE
    _shift_parentheses(parens, prefix, digit, suffix, continuation_line)
    return prefix, suffix, tuple(parens)


@dataclass(frozen=True)
class FiguredBassItem:
    """
    One line of a figured-bass stack.

    Construction settles the fields into the slots the parser would read them
    into (see ``settle_slots``), so ``canonical_text`` always parses back to an
    equal item.

    Attributes:
        order:             Line index within the owning FiguredBass (0 = top).
        prefix:            Accidental before the digit. Never PLUS, BACKSLASH or SLASH.
        digit:             0-9, or None when the line has no digit at all.
        suffix:            Accidental or diacritic after the digit.
        continuation_line: Whether a holding line extends to the right.
        parentheses:       The five bracket slots, from before the prefix to
                           after the continuation line. Matching open and closed
                           brackets is left to the user.
    """

    order: int = 0
    prefix: Modifier = Modifier.NONE
    digit: int | None = None
    suffix: Modifier = Modifier.NONE
    continuation_line: bool = False
    parentheses: tuple[Parenthesis, ...] = NO_PARENTHESES

    def __post_init__(self) -> None:
        object.__setattr__(self, "prefix", Modifier(self.prefix))
        object.__setattr__(self, "suffix", Modifier(self.suffix))
        object.__setattr__(self, "continuation_line", bool(self.continuation_line))
        parentheses = tuple(Parenthesis(p) for p in self.parentheses)
        if len(parentheses) != PARENTHESIS_SLOTS:
            raise ValueError(f"Expected {PARENTHESIS_SLOTS} parenthesis slots, got {len(parentheses)}.")
        object.__setattr__(self, "parentheses", parentheses)

        if self.digit is not None and not 0 <= self.digit <= MAX_DIGIT:
            raise MalformedTokenError(f"Digit must be between 0 and {MAX_DIGIT}, got {self.digit}")
        if not self.prefix.is_prefix_capable:
            raise MalformedTokenError(f"{self.prefix.name} cannot be used as a prefix")
        if (
            self.digit is None
            and self.prefix is Modifier.NONE
            and self.suffix is Modifier.NONE
            and not self.continuation_line
        ):
            raise EmptyItemError("Item has no digit, modifier or continuation line")
        if self.digit is None and self.suffix.is_combining:
            raise MalformedTokenError(f"{self.suffix.name} suffix requires a digit")
        if self.digit is None and self.prefix is not Modifier.NONE and self.suffix is not Modifier.NONE:
            raise MalformedTokenError("Prefix and suffix need a digit between them")

        prefix, suffix, parentheses = settle_slots(
            self.prefix, self.digit, self.suffix, self.continuation_line, self.parentheses
        )
        object.__setattr__(self, "prefix", prefix)
        object.__setattr__(self, "suffix", suffix)
        object.__setattr__(self, "parentheses", parentheses)

    @property
    def has_parentheses(self) -> bool:
        return any(p is not Parenthesis.NONE for p in self.parentheses)

    @property
    def normalized_text(self) -> str:
        return canonical_text(self)


@dataclass
class FiguredBass:
    """
    A complete figured-bass annotation attached to one timeline position.

    Attributes:
        raw_text:     The text as last entered. When parsing fails it is kept
                      verbatim and ``items`` stays empty.
        items:        Parsed lines, in stacking order (top to bottom).
        on_note:      True when anchored on a note onset, False when between notes.
        ticks:        Duration the annotation spans; drives continuation lines.
        tick:         Timeline position of the annotation.
        staff:        Staff index the annotation belongs to.
        line_lengths: One continuation-line length per item, written by layout.
    """

    raw_text: str = ""
    items: list[FiguredBassItem] = field(default_factory=list)
    on_note: bool = True
    ticks: int = 0
    tick: int = 0
    staff: int = 0
    line_lengths: list[float] = field(default_factory=list)

    @property
    def is_parsed(self) -> bool:
        return bool(self.items)

    @property
    def normalized_text(self) -> str | None:
        """Canonical multi-line text for re-editing, or None in the literal-text state."""
        if not self.items:
            return None
        return "\n".join(item.normalized_text for item in self.items)

    @property
    def has_parentheses(self) -> bool:
        return any(item.has_parentheses for item in self.items)

    def item(self, order: int) -> FiguredBassItem:
        for candidate in self.items:
            if candidate.order == order:
                return candidate
        raise IndexError(f"No figured bass item with order {order}")

    def line_length(self, index: int) -> float:
        if 0 <= index < len(self.line_lengths):
            return self.line_lengths[index]
        return 0.0

    def set_ticks(self, ticks: int) -> None:
        """Change the duration; line lengths are stale until the next layout pass."""
        self.ticks = ticks
        self.line_lengths = []

    def replace_items(self, items: Sequence[FiguredBassItem]) -> None:
        orders = [item.order for item in items]
        if len(set(orders)) != len(orders):
            raise ValueError(f"Item orders must be unique, got {orders}")
        self.items = list(items)
        self.line_lengths = []
