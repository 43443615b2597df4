"""
Error types raised by the m6A prediction pipeline.

Every error aborts the whole call: no partial tables are returned and no
rows are skipped.
"""

from typing import List, Optional, Sequence


class M6APredictionError(ValueError):
    """Base class for all pipeline errors."""

    def __init__(self, message: str, column: Optional[str] = None,
                 rows: Optional[Sequence[int]] = None):
        """
        Args:
            message: Human-readable description
            column: Offending column, if known
            rows: Offending row positions (0-based), if known
        """
        self.column = column
        self.rows: List[int] = list(rows) if rows is not None else []
        if self.rows:
            shown = ', '.join(str(r) for r in self.rows[:10])
            if len(self.rows) > 10:
                shown += ', ...'
            message = f"{message} (rows: {shown})"
        super().__init__(message)


class SchemaError(M6APredictionError):
    """Required feature column absent, or not usable as its declared type."""


class EncodingError(M6APredictionError):
    """DNA sequences of unequal length or outside the nucleotide alphabet."""


class CategoricalDomainError(M6APredictionError):
    """RNA_type / RNA_region value outside its fixed level set."""

    def __init__(self, message: str, column: Optional[str] = None,
                 rows: Optional[Sequence[int]] = None,
                 values: Optional[Sequence[str]] = None):
        self.values = list(values) if values is not None else []
        super().__init__(message, column=column, rows=rows)


class ClassifierInvocationError(M6APredictionError):
    """The classifier failed or returned unusable probabilities."""
