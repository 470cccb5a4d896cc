"""CellSource protocol and cell status dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union, runtime_checkable

from cellcalc.calc._errors import CellError


@dataclass(frozen=True)
class Unknown:
    """Not yet evaluated in the current epoch."""


@dataclass(frozen=True)
class Calculating:
    """Evaluation in progress; seen from outside only while a cycle unwinds."""


@dataclass(frozen=True)
class Valid:
    """Evaluated to a number."""

    value: float


@dataclass(frozen=True)
class Error:
    """Evaluated to an error."""

    error: CellError

    @property
    def message(self) -> str:
        return self.error.message


CellStatus = Union[Unknown, Calculating, Valid, Error]

UNKNOWN = Unknown()
CALCULATING = Calculating()


@runtime_checkable
class CellSource(Protocol):
    """What the evaluator calls back into to resolve ``@`` references."""

    def get_value(
        self,
        row: int,
        column: int,
        derived_message: str | None = None,
        *,
        depth: int = 0,
    ) -> float | CellError:
        """Return the cell's value or the error that stands in for it.

        *depth* is the nesting level of the caller; implementations pass it
        on to any evaluation they start so the recursion cap spans cells.
        """
        ...
