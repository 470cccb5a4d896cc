"""Tokenizer for the formula language."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterator
from dataclasses import dataclass

from cellcalc.calc._errors import CellError

# ---------------------------------------------------------------------------
# Formula detection
# ---------------------------------------------------------------------------

# Leading blanks before the '=' prefix (spaces and tabs only)
_BLANKS = " \t"

# ASCII whitespace skipped between tokens
_WHITESPACE = " \t\n\v\f\r"

_NUMBER_RE = re.compile(r"\d+(?:\.\d*)?(?:[eE][+-]?\d+)?", re.ASCII)


def find_formula(text: str) -> str | None:
    """Return the formula body after the ``=`` prefix, or None for literal text."""
    stripped = text.lstrip(_BLANKS)
    if stripped.startswith("="):
        return stripped[1:]
    return None


def is_blank(text: str) -> bool:
    """True when *text* holds nothing but spaces and tabs."""
    return not text.strip(_BLANKS)


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


class TokenKind(enum.Enum):
    NUMBER = "0"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    PERCENT = "%"
    CARET = "^"
    AT = "@"
    COLUMN = "c"
    ROW = "r"
    LPAREN = "("
    RPAREN = ")"
    END = ""


_SINGLE_CHAR = {
    kind.value: kind
    for kind in TokenKind
    if kind not in (TokenKind.NUMBER, TokenKind.END)
}


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: float = 0.0


END = Token(TokenKind.END)


class Tokenizer:
    """Streams tokens out of a formula body.

    The first lexical error is kept in :attr:`error` and truncates the input:
    every later :meth:`next` returns ``END``.  :meth:`truncate` lets the
    parser do the same when it hits a grammar error.
    """

    __slots__ = ("_text", "_pos", "error")

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0
        self.error: CellError | None = None

    @property
    def exhausted(self) -> bool:
        return self._pos >= len(self._text)

    def truncate(self) -> None:
        """Drop the remaining input."""
        self._pos = len(self._text)

    def fail(self, error: CellError) -> None:
        """Record *error* unless one is already recorded, then truncate."""
        if self.error is None:
            self.error = error
            self.truncate()

    def next(self) -> Token:
        text = self._text
        pos = self._pos
        while pos < len(text) and text[pos] in _WHITESPACE:
            pos += 1
        self._pos = pos
        if pos >= len(text):
            return END

        ch = text[pos]
        if "0" <= ch <= "9":
            m = _NUMBER_RE.match(text, pos)
            assert m is not None
            self._pos = m.end()
            return Token(TokenKind.NUMBER, float(m.group()))

        kind = _SINGLE_CHAR.get(ch)
        if kind is not None:
            self._pos = pos + 1
            return Token(kind)

        self.fail(CellError.UNKNOWN_TOKEN)
        return END

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next()
            if token.kind is TokenKind.END:
                return
            yield token
