"""Exception types raised by the figured-bass parser, glyph registry and layout."""

from __future__ import annotations


class FiguredBassError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(FiguredBassError):
    """The font or layout configuration could not be read."""


# ── Parsing ─────────────────────────────────────────────────────────────────

class ParseError(FiguredBassError, ValueError):
    """
    An annotation line could not be turned into a figured-bass item.

    Attributes:
        text:   The offending line, when known.
        column: Zero-based cursor position where parsing stopped, when known.
    """

    def __init__(self, message: str, text: str | None = None, column: int | None = None) -> None:
        self.text = text
        self.column = column
        if text is not None:
            where = f" at column {column}" if column is not None else ""
            message = f"{message}{where} in {text!r}"
        super().__init__(message)


class MalformedTokenError(ParseError):
    """A slot met a character sequence it cannot accept."""


class EmptyItemError(ParseError):
    """The line carries no digit, modifier or continuation line."""


class TrailingGarbageError(ParseError):
    """Characters were left over after every slot had been tried."""


# ── Locally recovered conditions ────────────────────────────────────────────

class UnknownFontError(FiguredBassError, KeyError):
    """No glyph table is registered under the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"No such figured bass font: {self.name!r}"


class NoForwardBoundaryError(FiguredBassError, LookupError):
    """The timeline has no onset after the requested tick."""

    def __init__(self, staff: int, tick: int) -> None:
        self.staff = staff
        self.tick = tick
        super().__init__(f"No onset on staff {staff} at or after tick {tick}")
