"""ItemParser: turns one line of figured-bass input into a validated item."""

from __future__ import annotations

from figuredbass.errors import EmptyItemError, MalformedTokenError, TrailingGarbageError
from figuredbass.models import FiguredBassItem
from figuredbass.symbols import DEFAULT_TOKENS, Modifier, Parenthesis, TokenTable


class _Cursor:
    """Read position over one input line."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    @property
    def remaining(self) -> str:
        return self.text[self.pos :]

    def advance(self, token: str) -> None:
        self.pos += len(token)


class ItemParser:
    """
    Slot-by-slot parser for a single figured-bass line.

    Slot order
    ----------
    ``[paren] [prefix] [paren] [digit] [paren] [suffix] [paren] [continuation] [paren]``

    Every slot is optional and greedy: it takes the longest token of its kind
    found at the cursor, or contributes nothing and leaves the cursor alone.
    Afterwards the line must be fully consumed and must carry at least a digit,
    a modifier or a continuation marker.

    Brackets are never checked for balance; ``(6]`` is as good as ``(6)``.
    """

    def __init__(self, tokens: TokenTable = DEFAULT_TOKENS) -> None:
        self.tokens = tokens

    # ------------------------------------------------------------------
    # Slot parsers
    # ------------------------------------------------------------------

    def _parse_parenthesis(self, cursor: _Cursor) -> Parenthesis:
        token = self.tokens.match_parenthesis(cursor.text, cursor.pos)
        if token is None:
            return Parenthesis.NONE
        cursor.advance(token)
        return self.tokens.parentheses[token]

    def _parse_modifier(self, cursor: _Cursor, is_prefix: bool) -> Modifier:
        start = cursor.pos
        token = self.tokens.match_modifier(cursor.text, cursor.pos)
        if token is None:
            return Modifier.NONE
        modifier = self.tokens.modifiers[token]
        if is_prefix and not modifier.is_prefix_capable:
            raise MalformedTokenError(f"{token!r} is only allowed after the digit", cursor.text, start)
        cursor.advance(token)
        # a slot holds one accidental: 'b#' or 'bbb' cannot be read as one
        if self.tokens.match_modifier(cursor.text, cursor.pos) is not None:
            raise MalformedTokenError("Accidentals cannot be combined", cursor.text, start)
        return modifier

    def _parse_digit(self, cursor: _Cursor) -> int | None:
        char = cursor.text[cursor.pos : cursor.pos + 1]
        if char and char in "0123456789":
            cursor.advance(char)
            return int(char)
        return None

    def _parse_continuation(self, cursor: _Cursor) -> bool:
        token = self.tokens.match_continuation(cursor.text, cursor.pos)
        if token is None:
            return False
        cursor.advance(token)
        return True

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse(self, raw: str, order: int = 0) -> FiguredBassItem:
        """
        Parse one annotation line.

        Args:
            raw:   The line, without line-break characters. Surrounding
                   whitespace is ignored.
            order: Line index of the item within its annotation.

        Returns:
            The parsed item.

        Raises:
            MalformedTokenError:  A slot holds a token it cannot accept.
            TrailingGarbageError: Input is left after the last slot.
            EmptyItemError:       No digit, modifier or continuation line.
        """
        cursor = _Cursor(raw.strip())
        parens = [Parenthesis.NONE] * 5

        parens[0] = self._parse_parenthesis(cursor)
        prefix = self._parse_modifier(cursor, is_prefix=True)
        parens[1] = self._parse_parenthesis(cursor)
        digit = self._parse_digit(cursor)
        parens[2] = self._parse_parenthesis(cursor)
        suffix = self._parse_modifier(cursor, is_prefix=False)
        parens[3] = self._parse_parenthesis(cursor)
        continuation_line = self._parse_continuation(cursor)
        parens[4] = self._parse_parenthesis(cursor)

        if cursor.remaining:
            raise TrailingGarbageError("Unexpected input", cursor.text, cursor.pos)
        if digit is None and prefix is Modifier.NONE and suffix is Modifier.NONE and not continuation_line:
            raise EmptyItemError("Nothing to display", cursor.text)

        try:
            return FiguredBassItem(
                order=order,
                prefix=prefix,
                digit=digit,
                suffix=suffix,
                continuation_line=continuation_line,
                parentheses=tuple(parens),
            )
        except MalformedTokenError as exc:
            raise MalformedTokenError(str(exc), cursor.text) from exc


DEFAULT_PARSER = ItemParser()
