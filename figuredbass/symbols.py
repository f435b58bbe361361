"""Modifier and parenthesis enumerations plus the token tables used to read and write them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Final, Mapping


class Modifier(IntEnum):
    """Accidental or diacritic written before or after the main digit."""

    NONE = 0
    DOUBLE_FLAT = 1
    FLAT = 2
    NATURAL = 3
    SHARP = 4
    DOUBLE_SHARP = 5
    PLUS = 6
    BACKSLASH = 7
    SLASH = 8

    @property
    def is_prefix_capable(self) -> bool:
        """Plus, backslash and slash only make sense after a digit."""
        return self <= Modifier.DOUBLE_SHARP

    @property
    def is_combining(self) -> bool:
        """True for the shapes that a font may fuse with the digit glyph."""
        return self >= Modifier.PLUS


class Parenthesis(IntEnum):
    """Bracket occupying one of the five parenthesis slots of an item."""

    NONE = 0
    ROUND_OPEN = 1
    ROUND_CLOSED = 2
    SQUARED_OPEN = 3
    SQUARED_CLOSED = 4


#: Number of parenthesis slots: before prefix, prefix/digit, digit/suffix,
#: suffix/continuation line, after continuation line.
PARENTHESIS_SLOTS: Final[int] = 5

NO_PARENTHESES: Final[tuple[Parenthesis, ...]] = (Parenthesis.NONE,) * PARENTHESIS_SLOTS

# ── Canonical spellings ─────────────────────────────────────────────────────

CANONICAL_MODIFIER: Final[Mapping[Modifier, str]] = {
    Modifier.NONE: "",
    Modifier.DOUBLE_FLAT: "bb",
    Modifier.FLAT: "b",
    Modifier.NATURAL: "h",
    Modifier.SHARP: "#",
    Modifier.DOUBLE_SHARP: "##",
    Modifier.PLUS: "+",
    Modifier.BACKSLASH: "\\",
    Modifier.SLASH: "/",
}

CANONICAL_PARENTHESIS: Final[Mapping[Parenthesis, str]] = {
    Parenthesis.NONE: "",
    Parenthesis.ROUND_OPEN: "(",
    Parenthesis.ROUND_CLOSED: ")",
    Parenthesis.SQUARED_OPEN: "[",
    Parenthesis.SQUARED_CLOSED: "]",
}

CANONICAL_CONTINUATION: Final[str] = "_"


def _longest_first(tokens: Mapping[str, object]) -> tuple[str, ...]:
    return tuple(sorted(tokens, key=len, reverse=True))


@dataclass(frozen=True)
class TokenTable:
    """
    The set of input tokens the item parser recognises for each slot kind.

    Attributes:
        modifiers:     Token text → Modifier. Several spellings may map to the
                       same modifier (e.g. ``h`` and ``n`` for natural).
        parentheses:   Token text → Parenthesis.
        continuation:  Tokens that mark a continuation line.

    Matching is greedy: at any cursor position the longest token that fits wins,
    so ``bb`` is read as one double flat, never as two flats.
    """

    modifiers: Mapping[str, Modifier]
    parentheses: Mapping[str, Parenthesis]
    continuation: frozenset[str]
    _modifier_order: tuple[str, ...] = field(init=False, repr=False, compare=False)
    _parenthesis_order: tuple[str, ...] = field(init=False, repr=False, compare=False)
    _continuation_order: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if any(not token for token in (*self.modifiers, *self.parentheses, *self.continuation)):
            raise ValueError("Token table entries must not be empty strings.")
        object.__setattr__(self, "_modifier_order", _longest_first(self.modifiers))
        object.__setattr__(self, "_parenthesis_order", _longest_first(self.parentheses))
        object.__setattr__(self, "_continuation_order", _longest_first(dict.fromkeys(self.continuation)))

    def match_modifier(self, text: str, pos: int) -> str | None:
        return _match(text, pos, self._modifier_order)

    def match_parenthesis(self, text: str, pos: int) -> str | None:
        return _match(text, pos, self._parenthesis_order)

    def match_continuation(self, text: str, pos: int) -> str | None:
        return _match(text, pos, self._continuation_order)

    def extended(
        self,
        *,
        modifiers: Mapping[str, Modifier] | None = None,
        parentheses: Mapping[str, Parenthesis] | None = None,
        continuation: frozenset[str] | None = None,
    ) -> TokenTable:
        """Return a copy with extra spellings added on top of this table."""
        return TokenTable(
            modifiers={**self.modifiers, **(modifiers or {})},
            parentheses={**self.parentheses, **(parentheses or {})},
            continuation=self.continuation | (continuation or frozenset()),
        )


def _match(text: str, pos: int, candidates: tuple[str, ...]) -> str | None:
    for token in candidates:
        if text.startswith(token, pos):
            return token
    return None


DEFAULT_TOKENS: Final[TokenTable] = TokenTable(
    modifiers={
        "bb": Modifier.DOUBLE_FLAT,
        "b": Modifier.FLAT,
        "h": Modifier.NATURAL,
        "n": Modifier.NATURAL,
        "##": Modifier.DOUBLE_SHARP,
        "x": Modifier.DOUBLE_SHARP,
        "#": Modifier.SHARP,
        "+": Modifier.PLUS,
        "\\": Modifier.BACKSLASH,
        "/": Modifier.SLASH,
    },
    parentheses={
        "(": Parenthesis.ROUND_OPEN,
        ")": Parenthesis.ROUND_CLOSED,
        "[": Parenthesis.SQUARED_OPEN,
        "]": Parenthesis.SQUARED_CLOSED,
    },
    continuation=frozenset({"_", "-"}),
)
