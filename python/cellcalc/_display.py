"""Text for showing cells in fixed-width columns.

Only produces strings; drawing them (colours, cursor, terminal control) is
left to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass

from cellcalc._grid import Grid
from cellcalc.calc._errors import CellError
from cellcalc.calc._protocol import Error
from cellcalc.calc._tokenizer import find_formula

COLUMN_WIDTH = 18

_ELLIPSIS = "..."


@dataclass(frozen=True)
class CellDisplay:
    """What to show for one cell."""

    text: str
    is_error: bool = False


def fit(text: str, width: int = COLUMN_WIDTH) -> str:
    """Cut *text* to *width* characters, ending in ``...`` when cut."""
    if len(text) <= width:
        return text
    return text[: max(width - len(_ELLIPSIS), 0)] + _ELLIPSIS


def format_value(value: float, width: int = COLUMN_WIDTH) -> str:
    """``%g`` formatting, right-aligned in *width*."""
    return fit(f"{value:>{width}g}", width)


def cell_display(
    grid: Grid,
    row: int,
    column: int,
    show_formulas: bool = False,
    width: int = COLUMN_WIDTH,
) -> CellDisplay:
    """Display text for a cell in the formula view or the value view.

    Literal text is shown as stored in both views and never evaluated.
    """
    text = grid.get_raw_text(row, column)
    formula = find_formula(text)
    if show_formulas or formula is None:
        return CellDisplay(fit(formula if formula is not None else text, width))
    value = grid.get_display_value(row, column)
    if isinstance(value, CellError):
        return CellDisplay(fit(value.message, width), is_error=True)
    return CellDisplay(format_value(value, width))


def status_line(grid: Grid, row: int, column: int) -> str:
    """Banner text: the latched diagnostic (consumed), else the cell's own error."""
    latched = grid.take_latched_diagnostic()
    if latched is not None:
        return latched
    status = grid.status(row, column)
    if isinstance(status, Error):
        return status.message
    return ""
