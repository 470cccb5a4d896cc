"""Grid: fixed-size cell store and lazy, memoized evaluation engine.

Every edit starts a new epoch by marking all cells ``Unknown``.  Values are
then computed on demand: asking for a cell evaluates its formula, which may
ask for other cells through ``@``.  A cell that is asked for while it is
still ``Calculating`` is part of a cycle and answers ``Circular reference``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

import numpy as np

from cellcalc._diagnostics import Diagnostics
from cellcalc.calc._errors import CellError
from cellcalc.calc._evaluator import MAX_DEPTH, evaluate
from cellcalc.calc._protocol import (
    CALCULATING,
    UNKNOWN,
    Calculating,
    CellStatus,
    Error,
    Unknown,
    Valid,
)
from cellcalc.calc._tokenizer import find_formula, is_blank

logger = logging.getLogger(__name__)

ROWS = 20
COLUMNS = 4


class _Cell:
    __slots__ = ("text", "status")

    def __init__(self) -> None:
        self.text = ""
        self.status: CellStatus = UNKNOWN


class Grid:
    """A ``rows x columns`` sheet of cells holding text or ``=`` formulas.

    Usage::

        grid = Grid()
        grid.set_text(0, 0, "=2+3*4")
        grid.set_text(1, 0, "=0@0*2")
        grid.get_display_value(1, 0)    # 28.0
        grid.take_latched_diagnostic()  # None
    """

    __slots__ = ("_rows", "_columns", "_cells", "_diagnostics", "_max_depth")

    def __init__(
        self,
        rows: int = ROWS,
        columns: int = COLUMNS,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        if rows <= 0 or columns <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {rows}x{columns}")
        self._rows = rows
        self._columns = columns
        self._cells = [[_Cell() for _ in range(columns)] for _ in range(rows)]
        self._diagnostics = Diagnostics()
        self._max_depth = max_depth

    @classmethod
    def from_records(
        cls,
        records: Iterable[tuple[int, int, str]],
        rows: int = ROWS,
        columns: int = COLUMNS,
        max_depth: int = MAX_DEPTH,
    ) -> Grid:
        """Build a grid from ``(row, column, text)`` records."""
        grid = cls(rows, columns, max_depth)
        for row, column, text in records:
            grid.set_text(row, column, text)
        return grid

    # ------------------------------------------------------------------
    # Bounds
    # ------------------------------------------------------------------

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def shape(self) -> tuple[int, int]:
        return (self._rows, self._columns)

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def diagnostics(self) -> Diagnostics:
        return self._diagnostics

    def in_bounds(self, row: int, column: int) -> bool:
        return 0 <= row < self._rows and 0 <= column < self._columns

    def _cell(self, row: int, column: int) -> _Cell:
        if not self.in_bounds(row, column):
            raise IndexError(
                f"Cell ({row}, {column}) outside {self._rows}x{self._columns} grid"
            )
        return self._cells[row][column]

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def get_raw_text(self, row: int, column: int) -> str:
        return self._cell(row, column).text

    def set_text(self, row: int, column: int, text: str) -> None:
        """Store *text* and invalidate every cell (a new epoch)."""
        cell = self._cell(row, column)
        if cell.text == text:
            return
        cell.text = text
        self.invalidate()

    def copy_text(self, src_row: int, src_column: int, dst_row: int, dst_column: int) -> None:
        """Copy the raw text of one cell into another."""
        self.set_text(dst_row, dst_column, self.get_raw_text(src_row, src_column))

    def invalidate(self) -> None:
        """Reset every cell's status to ``Unknown``."""
        for cells in self._cells:
            for cell in cells:
                cell.status = UNKNOWN

    def records(self) -> Iterator[tuple[int, int, str]]:
        """Yield ``(row, column, text)`` for each non-blank cell, row-major."""
        for row, cells in enumerate(self._cells):
            for column, cell in enumerate(cells):
                if not is_blank(cell.text):
                    yield row, column, cell.text

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def status(self, row: int, column: int) -> CellStatus:
        """Current status without triggering evaluation."""
        return self._cell(row, column).status

    def get_value(
        self,
        row: int,
        column: int,
        derived_message: str | None = None,
        *,
        depth: int = 0,
    ) -> float | CellError:
        """Value of the cell at (*row*, *column*), evaluating it if needed.

        When the cell holds an error and *derived_message* is not None, an
        error carrying *derived_message* is returned instead of the stored
        one, so callers can relay that a neighbour failed without relaying
        why.  Cycles answer ``Circular reference`` and leave state alone.
        """
        if not self.in_bounds(row, column):
            return CellError.OUT_OF_RANGE
        cell = self._cells[row][column]
        if isinstance(cell.status, Unknown):
            self._update(row, column, depth)
        status = cell.status
        if isinstance(status, Calculating):
            return CellError.CIRCULAR
        if isinstance(status, Error):
            if derived_message is not None:
                return CellError.propagated(derived_message)
            return status.error
        assert isinstance(status, Valid)
        return status.value

    def get_display_value(self, row: int, column: int) -> float | CellError:
        """Value or the cell's own error, for showing to the user."""
        return self.get_value(row, column, None)

    def _update(self, row: int, column: int, depth: int) -> None:
        cell = self._cells[row][column]
        cell.status = CALCULATING
        result = evaluate(cell.text, row, column, self, depth, self._max_depth)
        if isinstance(result, CellError):
            cell.status = Error(result)
            self._diagnostics.report(result.message)
            logger.debug("Cell (%d, %d) %r: %s", row, column, cell.text, result.kind.name)
        else:
            cell.status = Valid(result)

    def take_latched_diagnostic(self) -> str | None:
        """Consume the first error message reported since the last call."""
        return self._diagnostics.take()

    def to_array(self) -> np.ndarray:
        """Display values as a float array, NaN where a cell has no value.

        Literal-text cells are skipped rather than evaluated, so they do not
        report ``No formula`` to the diagnostics latch.
        """
        out = np.full(self.shape, np.nan, dtype=np.float64)
        for row in range(self._rows):
            for column in range(self._columns):
                if find_formula(self._cells[row][column].text) is None:
                    continue
                value = self.get_display_value(row, column)
                if not isinstance(value, CellError):
                    out[row, column] = value
        return out

    def __repr__(self) -> str:
        filled = sum(1 for _ in self.records())
        return f"<Grid {self._rows}x{self._columns} cells={filled}>"
