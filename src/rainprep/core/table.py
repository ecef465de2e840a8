"""
rainprep/core/table
~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

import numpy as np
import pandas as pd

from .errors import IncompleteMatrixError
from ..util.warnings import warn

RESPONSE = "response"
TERM = "term"
ESTIMATE = "estimate"
P_VALUE = "p_value"
RECORD_COLUMNS = [RESPONSE, TERM, ESTIMATE, P_VALUE]

# Missing pairs shown in an IncompleteMatrixError message
_MAX_MISSING_SHOWN = 5


def _unique_in_order(values: pd.Series) -> List[str]:
    """Distinct values in order of first appearance."""
    return values.drop_duplicates().tolist()


class RecordTable:
    """
    Immutable container for long-format (response, term, estimate, p_value) records.

    Note: this object should be treated as immutable. Derivation and ordering
    return new objects and never write back into the wrapped frame.
    """

    def __init__(
        self,
        df: pd.DataFrame,
        *,
        columns: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Initializes RecordTable.

        Args:
            df (pd.DataFrame): Long-format records, one row per (response, term) pair.

        Kwargs:
            columns (Optional[Mapping[str, str]]): Renames source columns to the record
                fields, e.g. {"p.value": "p_value"}. Defaults to None.
        """
        # Defensive copy: downstream stages assume the records are frozen
        df = df.rename(columns=dict(columns)) if columns else df.copy()
        self._validate_columns(df)
        self.df = (
            df[RECORD_COLUMNS]
            .reset_index(drop=True)
            .astype({RESPONSE: str, TERM: str, ESTIMATE: "float64", P_VALUE: "float64"})
        )

        self._validate()

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> RecordTable:
        """
        Builds a RecordTable from an iterable of mappings.

        Args:
            records (Iterable[Mapping[str, Any]]): Records with response, term,
                estimate and p_value keys.

        Returns:
            RecordTable: Validated table.
        """
        rows = [dict(r) for r in records]
        if not rows:
            return cls(pd.DataFrame(columns=RECORD_COLUMNS))
        return cls(pd.DataFrame(rows))

    @staticmethod
    def _validate_columns(df: pd.DataFrame) -> None:
        """
        Validates that record columns are present and hold usable values.

        Args:
            df (pd.DataFrame): Candidate record frame.

        Raises:
            ValueError: If columns are missing or values are non-numeric/missing.
        """
        missing = [c for c in RECORD_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"Record table is missing required columns: {missing}")
        for col in (ESTIMATE, P_VALUE):
            if not pd.api.types.is_numeric_dtype(df[col]) and len(df) > 0:
                raise ValueError(f"Column {col!r} must be numeric")
        if df[RECORD_COLUMNS].isna().any().any():
            raise ValueError("Record table must not contain missing values")

    def _validate(self) -> None:
        """
        Validates record-level invariants.

        Raises:
            ValueError: If (response, term) pairs repeat or values are not finite.
        """
        if self.df.duplicated(subset=[RESPONSE, TERM]).any():
            dupes = self.df.loc[self.df.duplicated(subset=[RESPONSE, TERM]), [RESPONSE, TERM]]
            first = tuple(dupes.iloc[0])
            raise ValueError(f"(response, term) pairs must be unique; duplicate {first!r}")
        if not np.isfinite(self.df[[ESTIMATE, P_VALUE]].to_numpy()).all():
            raise ValueError("estimate and p_value must be finite")
        n_above = int((self.df[P_VALUE] > 1.0).sum())
        if n_above:
            warn(f"{n_above} p-values exceed 1; their -log10 transform is negative", stacklevel=4)

    @property
    def n_records(self) -> int:
        """Number of records."""
        return int(self.df.shape[0])

    @property
    def terms(self) -> List[str]:
        """Distinct terms in order of first appearance."""
        return _unique_in_order(self.df[TERM])

    @property
    def responses(self) -> List[str]:
        """Distinct responses in order of first appearance."""
        return _unique_in_order(self.df[RESPONSE])

    def pivot(self, values: str = ESTIMATE) -> pd.DataFrame:
        """
        Pivots records into a complete term x response matrix.

        Rows follow term first-appearance order and columns follow response
        first-appearance order, so identical tables give identical matrices.

        Args:
            values (str): Record column to place in the cells. Defaults to "estimate".

        Returns:
            pd.DataFrame: Matrix indexed by term with one column per response.

        Raises:
            IncompleteMatrixError: If any (term, response) combination is missing.
        """
        wide = self.df.pivot(index=TERM, columns=RESPONSE, values=values)
        wide = wide.reindex(index=self.terms, columns=self.responses)
        rows, cols = np.nonzero(wide.isna().to_numpy())
        if rows.size:
            missing = [(wide.columns[c], wide.index[r]) for r, c in zip(rows, cols)]
            shown = ", ".join(f"({r}, {t})" for r, t in missing[:_MAX_MISSING_SHOWN])
            extra = len(missing) - _MAX_MISSING_SHOWN
            more = f" and {extra} more" if extra > 0 else ""
            raise IncompleteMatrixError(
                f"Term x response matrix is incomplete; missing (response, term) {shown}{more}"
            )
        wide.index.name = TERM
        wide.columns.name = RESPONSE
        return wide

    def __len__(self) -> int:
        return self.n_records

    def __repr__(self) -> str:
        return (
            f"RecordTable(n_records={self.n_records}, n_terms={len(self.terms)}, "
            f"n_responses={len(self.responses)})"
        )
