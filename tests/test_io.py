"""Tests for cellcalc save/load of ``row column text`` lines."""

from __future__ import annotations

from pathlib import Path

import pytest
from cellcalc import Grid, dumps, load, loads, save
from cellcalc._io import BAD_LINE, OUT_OF_RANGE
from cellcalc.calc._errors import CellError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _build_sheet() -> Grid:
    """Mixed grid: values, references, literals and every kind of error."""
    grid = Grid()
    grid.set_text(0, 0, "Prices")
    grid.set_text(1, 0, "=12.5")
    grid.set_text(2, 0, "=(r-1)@c*2")
    grid.set_text(3, 0, "=1@0+2@0")
    grid.set_text(0, 1, "=2^3^2")
    grid.set_text(1, 1, "=5/0")
    grid.set_text(2, 1, "=1@1")
    grid.set_text(3, 1, "=3@1")
    grid.set_text(4, 1, "=0@999")
    grid.set_text(5, 1, "  =r*10+c")
    grid.set_text(6, 1, "=(1+")
    return grid


def _all_display_values(grid: Grid) -> list[object]:
    return [
        grid.get_display_value(row, column)
        for row in range(grid.rows)
        for column in range(grid.columns)
    ]


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


class TestDumps:
    def test_format(self) -> None:
        grid = Grid()
        grid.set_text(2, 1, "=1+1")
        grid.set_text(0, 3, "note")
        assert dumps(grid) == "0 3 note\n2 1 =1+1\n"

    def test_blank_cells_skipped(self) -> None:
        grid = Grid()
        grid.set_text(0, 0, " \t ")
        assert dumps(grid) == ""


class TestLoads:
    def test_basic(self) -> None:
        grid = loads("0 0 =2\n1 0 =0@0*5\n")
        assert grid.get_display_value(1, 0) == 10.0
        assert grid.take_latched_diagnostic() is None

    def test_empty_input(self) -> None:
        grid = loads("")
        assert list(grid.records()) == []
        assert grid.take_latched_diagnostic() is None

    def test_no_trailing_newline(self) -> None:
        grid = loads("0 0 =2")
        assert grid.get_raw_text(0, 0) == "=2"

    def test_text_keeps_inner_spaces(self) -> None:
        grid = loads("0 0 two  words here\n")
        assert grid.get_raw_text(0, 0) == "two  words here"

    def test_text_directly_after_column(self) -> None:
        grid = loads("0 1=3\n")
        assert grid.get_raw_text(0, 1) == "=3"

    def test_bad_line(self) -> None:
        grid = loads("garbage\n0 0 =1\n")
        assert grid.get_raw_text(0, 0) == "=1"
        assert grid.take_latched_diagnostic() == BAD_LINE

    def test_missing_text_is_bad_line(self) -> None:
        grid = loads("0 0   \n")
        assert grid.take_latched_diagnostic() == BAD_LINE

    def test_column_digits_are_not_text(self) -> None:
        grid = loads("0 13\n")
        assert grid.get_raw_text(0, 1) == ""
        assert list(grid.records()) == []
        assert grid.take_latched_diagnostic() == BAD_LINE

    def test_out_of_range(self) -> None:
        grid = loads("25 0 =1\n0 9 =1\n")
        assert list(grid.records()) == []
        assert grid.take_latched_diagnostic() == OUT_OF_RANGE

    def test_first_problem_wins(self) -> None:
        grid = loads("99 0 =1\nnope\n")
        assert grid.take_latched_diagnostic() == OUT_OF_RANGE

    def test_custom_bounds(self) -> None:
        grid = loads("25 0 =1\n", rows=30, columns=2)
        assert grid.get_display_value(25, 0) == 1.0

    def test_custom_max_depth(self) -> None:
        deep = "=" + "(" * 20 + "1" + ")" * 20
        assert loads(f"0 0 {deep}\n").get_display_value(0, 0) == 1.0
        grid = loads(f"0 0 {deep}\n", max_depth=16)
        assert grid.max_depth == 16
        assert grid.get_display_value(0, 0) == CellError.TOO_DEEP


# ---------------------------------------------------------------------------
# Round trips
# ---------------------------------------------------------------------------


class TestRoundTrip:
    def test_display_values_survive(self, tmp_path: Path) -> None:
        grid = _build_sheet()
        path = tmp_path / "sheet.txt"
        save(grid, path)
        reloaded = load(path)
        assert _all_display_values(reloaded) == _all_display_values(grid)

    def test_string_round_trip(self) -> None:
        grid = _build_sheet()
        assert dumps(loads(dumps(grid))) == dumps(grid).replace("  =r*10+c", "=r*10+c")

    @pytest.mark.parametrize(
        "text",
        ["a\x0cb", "a\x0bb", "a\x1cb", "a\x85b", "a b", "a\rb", "a\r"],
    )
    def test_control_characters_in_text(self, text: str) -> None:
        grid = Grid()
        grid.set_text(0, 0, text)
        reloaded = loads(dumps(grid))
        assert reloaded.get_raw_text(0, 0) == text
        assert reloaded.take_latched_diagnostic() is None

    @pytest.mark.parametrize("text", ["a\x0cb", "a\rb", "=1+2\r"])
    def test_control_characters_through_file(self, tmp_path: Path, text: str) -> None:
        grid = Grid()
        grid.set_text(3, 2, text)
        path = tmp_path / "sheet.txt"
        save(grid, path)
        reloaded = load(path)
        assert reloaded.get_raw_text(3, 2) == text
        assert reloaded.take_latched_diagnostic() is None

    def test_max_depth_passed_through(self, tmp_path: Path) -> None:
        path = tmp_path / "sheet.txt"
        save(_build_sheet(), path)
        assert load(path, max_depth=32).max_depth == 32
        assert load(tmp_path / "nope.txt", max_depth=32).max_depth == 32

    def test_missing_file_gives_empty_grid(self, tmp_path: Path) -> None:
        grid = load(tmp_path / "nope.txt")
        assert list(grid.records()) == []
        assert grid.take_latched_diagnostic() is None

    def test_save_into_missing_directory_raises(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            save(Grid(), tmp_path / "missing" / "sheet.txt")
