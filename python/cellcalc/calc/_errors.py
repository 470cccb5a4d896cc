"""Typed error values produced by formula evaluation."""

from __future__ import annotations

import enum
from typing import Any


class ErrorKind(enum.Enum):
    """Why a cell has no value."""

    SYNTAX = "syntax"
    DIVIDE_BY_ZERO = "divide-by-zero"
    RANGE = "range"
    CIRCULAR_REFERENCE = "circular-reference"
    NO_FORMULA = "no-formula"
    PROPAGATED = "propagated"
    TOO_DEEP = "too-deep"


class CellError:
    """Error value returned in place of a number.

    Errors are plain values: they travel back through ``evaluate`` and
    ``Grid.get_value`` rather than being raised.  Two errors compare equal
    when kind and message match, and an error compares equal to its message
    string (``CellError.DIV0 == "Divide by 0"``).
    """

    __slots__ = ("kind", "message")

    UNKNOWN_TOKEN: CellError
    EXPECTED_RPAREN: CellError
    EXPECTED_FACTOR: CellError
    UNEXPECTED_TOKEN: CellError
    DIV0: CellError
    OUT_OF_RANGE: CellError
    CIRCULAR: CellError
    NO_FORMULA: CellError
    TOO_DEEP: CellError

    def __init__(self, kind: ErrorKind, message: str) -> None:
        self.kind = kind
        self.message = message

    @classmethod
    def propagated(cls, message: str = "") -> CellError:
        """Error relayed from another cell, carrying *message* instead of the cause."""
        return cls(ErrorKind.PROPAGATED, message)

    def __repr__(self) -> str:
        return f"CellError({self.kind.name}, {self.message!r})"

    def __str__(self) -> str:
        return self.message

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CellError):
            return self.kind is other.kind and self.message == other.message
        if isinstance(other, str):
            return self.message == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.kind, self.message))


# Singletons
CellError.UNKNOWN_TOKEN = CellError(ErrorKind.SYNTAX, "Syntax error: unknown token type")
CellError.EXPECTED_RPAREN = CellError(ErrorKind.SYNTAX, "Syntax error: expected ')'")
CellError.EXPECTED_FACTOR = CellError(ErrorKind.SYNTAX, "Syntax error: expected a factor")
CellError.UNEXPECTED_TOKEN = CellError(ErrorKind.SYNTAX, "Syntax error: unexpected token")
CellError.DIV0 = CellError(ErrorKind.DIVIDE_BY_ZERO, "Divide by 0")
CellError.OUT_OF_RANGE = CellError(ErrorKind.RANGE, "Cell out of range")
CellError.CIRCULAR = CellError(ErrorKind.CIRCULAR_REFERENCE, "Circular reference")
CellError.NO_FORMULA = CellError(ErrorKind.NO_FORMULA, "No formula")
CellError.TOO_DEEP = CellError(ErrorKind.TOO_DEEP, "Formula too deeply nested")


def is_error(val: Any) -> bool:
    """Return True if *val* is a CellError instance."""
    return isinstance(val, CellError)
