"""Formula evaluator: precedence climbing straight to a value.

The evaluator never builds a syntax tree.  It pulls tokens from a
:class:`~cellcalc.calc._tokenizer.Tokenizer` and folds them into a number as
it goes, calling back into a :class:`~cellcalc.calc._protocol.CellSource`
whenever a ``row @ column`` reference is applied::

    expr   := factor (operator expr)*
    factor := number | '-' factor | 'c' | 'r' | '(' expr ')'

Arithmetic follows C double semantics: ``%`` is ``fmod`` and ``^`` is
``pow``, so NaN and infinities come back as values rather than errors.
"""

from __future__ import annotations

import math

import numpy as np

from cellcalc.calc._errors import CellError
from cellcalc.calc._protocol import CellSource
from cellcalc.calc._tokenizer import END, Token, Tokenizer, TokenKind, find_formula

# Combined limit on expression nesting and reference-chain depth
MAX_DEPTH = 256

# ---------------------------------------------------------------------------
# Operator table
# ---------------------------------------------------------------------------

# kind -> (left binding power, right binding power)
_BINDING_POWERS: dict[TokenKind, tuple[int, int]] = {
    TokenKind.PLUS: (1, 2),
    TokenKind.MINUS: (1, 2),
    TokenKind.STAR: (3, 4),
    TokenKind.SLASH: (3, 4),
    TokenKind.PERCENT: (3, 4),
    TokenKind.CARET: (5, 5),
    TokenKind.AT: (7, 8),
}


def _to_index(value: float) -> int | None:
    """Truncate a reference operand toward zero; None if no cell could match."""
    if math.isnan(value) or math.isinf(value):
        return None
    index = int(value)
    if index < 0:
        return None
    return index


def _fmod(lhs: float, rhs: float) -> float:
    with np.errstate(all="ignore"):
        return np.fmod(np.float64(lhs), np.float64(rhs)).item()


def _power(lhs: float, rhs: float) -> float:
    # Domain and pole errors come back as NaN/inf
    with np.errstate(all="ignore"):
        return np.power(np.float64(lhs), np.float64(rhs)).item()


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------


class _Evaluator:
    """State for one evaluation of one formula body."""

    __slots__ = ("_tokens", "_token", "_row", "_column", "_cells", "_depth", "_max_depth")

    def __init__(
        self,
        body: str,
        row: int,
        column: int,
        cells: CellSource,
        depth: int,
        max_depth: int,
    ) -> None:
        self._tokens = Tokenizer(body)
        self._token: Token = END
        self._row = row
        self._column = column
        self._cells = cells
        self._depth = depth
        self._max_depth = max_depth

    @property
    def _failed(self) -> bool:
        return self._tokens.error is not None

    def run(self) -> float | CellError:
        self._advance()
        value = self._parse_expr(0)
        if self._token.kind is not TokenKind.END:
            self._tokens.fail(CellError.UNEXPECTED_TOKEN)
        if self._tokens.error is not None:
            return self._tokens.error
        return value

    def _advance(self) -> None:
        self._token = self._tokens.next()

    def _descend(self) -> bool:
        """Enter one nesting level; False (with TooDeep recorded) past the cap."""
        if self._depth >= self._max_depth:
            self._tokens.fail(CellError.TOO_DEEP)
            return False
        self._depth += 1
        return True

    # ------------------------------------------------------------------
    # Grammar
    # ------------------------------------------------------------------

    def _parse_expr(self, min_power: int) -> float:
        if not self._descend():
            return 0.0
        try:
            lhs = self._parse_factor()
            while True:
                op = self._token.kind
                powers = _BINDING_POWERS.get(op)
                if powers is None:
                    return lhs
                left_power, right_power = powers
                if left_power < min_power:
                    return lhs
                self._advance()
                rhs = self._parse_expr(right_power)
                lhs = self._apply(op, lhs, rhs)
        finally:
            self._depth -= 1

    def _parse_factor(self) -> float:
        if not self._descend():
            return 0.0
        try:
            token = self._token
            kind = token.kind
            if kind is TokenKind.NUMBER:
                self._advance()
                return token.value
            if kind is TokenKind.MINUS:
                self._advance()
                return -self._parse_factor()
            if kind is TokenKind.COLUMN:
                self._advance()
                return float(self._column)
            if kind is TokenKind.ROW:
                self._advance()
                return float(self._row)
            if kind is TokenKind.LPAREN:
                self._advance()
                value = self._parse_expr(0)
                if self._token.kind is not TokenKind.RPAREN:
                    self._tokens.fail(CellError.EXPECTED_RPAREN)
                self._advance()
                return value
            self._tokens.fail(CellError.EXPECTED_FACTOR)
            self._advance()
            return 0.0
        finally:
            self._depth -= 1

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def _apply(self, op: TokenKind, lhs: float, rhs: float) -> float:
        if op is TokenKind.PLUS:
            return lhs + rhs
        if op is TokenKind.MINUS:
            return lhs - rhs
        if op is TokenKind.STAR:
            return lhs * rhs
        if op is TokenKind.SLASH:
            if rhs == 0:
                return self._divide_by_zero()
            return lhs / rhs
        if op is TokenKind.PERCENT:
            if rhs == 0:
                return self._divide_by_zero()
            return _fmod(lhs, rhs)
        if op is TokenKind.CARET:
            return _power(lhs, rhs)
        if op is TokenKind.AT:
            return self._reference(lhs, rhs)
        raise AssertionError(f"not a binary operator: {op!r}")

    def _divide_by_zero(self) -> float:
        self._tokens.fail(CellError.DIV0)
        return 0.0

    def _reference(self, lhs: float, rhs: float) -> float:
        """Value of the cell at (lhs, rhs), or 0 with the lookup's error recorded."""
        if self._failed:
            return 0.0
        row, column = _to_index(lhs), _to_index(rhs)
        if row is None or column is None:
            self._tokens.fail(CellError.OUT_OF_RANGE)
            return 0.0
        result = self._cells.get_value(row, column, "", depth=self._depth + 1)
        if isinstance(result, CellError):
            self._tokens.fail(result)
            return 0.0
        return result


def evaluate(
    text: str,
    row: int,
    column: int,
    cells: CellSource,
    depth: int = 0,
    max_depth: int = MAX_DEPTH,
) -> float | CellError:
    """Evaluate a cell's raw *text* as seen from (*row*, *column*).

    Returns the number, or the first :class:`CellError` met along the way.
    Text without the ``=`` prefix is not a formula and yields
    ``CellError.NO_FORMULA`` without being tokenized.  ``@`` references are
    resolved through ``cells.get_value`` with an empty override message, so
    a failed neighbour shows up here as an empty-message error.
    """
    body = find_formula(text)
    if body is None:
        return CellError.NO_FORMULA
    return _Evaluator(body, row, column, cells, depth, max_depth).run()
