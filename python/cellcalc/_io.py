"""Load and save grids as ``row column text`` lines."""

from __future__ import annotations

import logging
import os
import re

from cellcalc._grid import COLUMNS, ROWS, Grid
from cellcalc.calc._evaluator import MAX_DEPTH

logger = logging.getLogger(__name__)

# "<row> <column> <text>"; text starts at the first non-blank after the column
_LINE_RE = re.compile(r"\s*(\d+)\s+(\d+)(?!\d)\s*(\S.*)", re.ASCII)

BAD_LINE = "Bad line in file"
OUT_OF_RANGE = "Row or column number out of range in file"


def dumps(grid: Grid) -> str:
    """Serialize every non-blank cell, one line each, row-major."""
    return "".join(f"{row} {column} {text}\n" for row, column, text in grid.records())


def loads(
    data: str,
    rows: int = ROWS,
    columns: int = COLUMNS,
    max_depth: int = MAX_DEPTH,
) -> Grid:
    """Build a grid from :func:`dumps` output.

    Only ``"\\n"`` ends a line; any other control character is cell text.
    Lines that do not parse, or whose coordinates fall outside the grid, are
    skipped and reported to the grid's diagnostics latch.
    """
    grid = Grid(rows, columns, max_depth)
    lines = data.split("\n")
    if lines[-1] == "":
        lines.pop()
    for lineno, line in enumerate(lines, start=1):
        m = _LINE_RE.fullmatch(line)
        if m is None:
            logger.debug("line %d: cannot parse %r", lineno, line)
            grid.diagnostics.report(BAD_LINE)
            continue
        row, column, text = int(m.group(1)), int(m.group(2)), m.group(3)
        if not grid.in_bounds(row, column):
            logger.debug("line %d: cell (%d, %d) out of range", lineno, row, column)
            grid.diagnostics.report(OUT_OF_RANGE)
            continue
        grid.set_text(row, column, text)
    return grid


def save(grid: Grid, filename: str | os.PathLike[str]) -> None:
    """Write *grid* to *filename*, replacing any existing file."""
    with open(filename, "w", encoding="utf-8", newline="") as f:
        f.write(dumps(grid))


def load(
    filename: str | os.PathLike[str],
    rows: int = ROWS,
    columns: int = COLUMNS,
    max_depth: int = MAX_DEPTH,
) -> Grid:
    """Read a grid from *filename*; a missing file gives an empty grid."""
    try:
        with open(filename, encoding="utf-8", newline="") as f:
            data = f.read()
    except FileNotFoundError:
        logger.debug("No file at %s, starting empty", filename)
        return Grid(rows, columns, max_depth)
    return loads(data, rows, columns, max_depth)
