"""cellcalc.calc - Formula language and evaluator."""

from cellcalc.calc._errors import CellError, ErrorKind, is_error
from cellcalc.calc._evaluator import MAX_DEPTH, evaluate
from cellcalc.calc._protocol import (
    Calculating,
    CellSource,
    CellStatus,
    Error,
    Unknown,
    Valid,
)
from cellcalc.calc._tokenizer import Token, Tokenizer, TokenKind, find_formula, is_blank

__all__ = [
    "Calculating",
    "CellError",
    "CellSource",
    "CellStatus",
    "Error",
    "ErrorKind",
    "MAX_DEPTH",
    "Token",
    "TokenKind",
    "Tokenizer",
    "Unknown",
    "Valid",
    "evaluate",
    "find_formula",
    "is_blank",
    "is_error",
]
