"""cellcalc: a small grid calculator with lazily evaluated ``=`` formulas.

Usage::

    from cellcalc import Grid, load, save

    grid = Grid()                    # 20 rows x 4 columns
    grid.set_text(0, 0, "=2+3*4")
    grid.set_text(0, 1, "=0@0/2")    # row @ column reads another cell
    grid.get_display_value(0, 1)     # 7.0
    save(grid, "sheet.txt")
    grid = load("sheet.txt")
"""

from cellcalc._diagnostics import Diagnostics
from cellcalc._display import (
    COLUMN_WIDTH,
    CellDisplay,
    cell_display,
    fit,
    format_value,
    status_line,
)
from cellcalc._grid import COLUMNS, ROWS, Grid
from cellcalc._io import dumps, load, loads, save
from cellcalc.calc import CellError, ErrorKind, evaluate, is_error

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "COLUMNS",
    "COLUMN_WIDTH",
    "CellDisplay",
    "CellError",
    "Diagnostics",
    "ErrorKind",
    "Grid",
    "ROWS",
    "cell_display",
    "dumps",
    "evaluate",
    "fit",
    "format_value",
    "is_error",
    "load",
    "loads",
    "save",
    "status_line",
]
