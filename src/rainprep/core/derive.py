"""
rainprep/core/derive
~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np
import pandas as pd

from .errors import DomainError, EmptyInputError
from .table import ESTIMATE, P_VALUE, RecordTable

NEG_LOG10_P = "neg_log10_p"
CAPPED_P = "capped_p"
DEFAULT_CEILING = 15.0


@dataclass(frozen=True, eq=False)
class DerivedTable:
    """
    Data class for records augmented with display fields and symmetric estimate limits.
    """

    table: RecordTable
    df: pd.DataFrame
    ceiling: float
    max_abs_estimate: float

    @property
    def limits(self) -> Tuple[float, float]:
        """Symmetric colour-scale limits (-max|estimate|, +max|estimate|)."""
        return (-self.max_abs_estimate, self.max_abs_estimate)

    @property
    def breaks(self) -> Tuple[float, float, float, float, float]:
        """Scale breakpoints at -max, -max/2, 0, max/2, max."""
        m = self.max_abs_estimate
        return (-m, -m / 2.0, 0.0, m / 2.0, m)

    @property
    def count_capped(self) -> int:
        """Number of records whose transformed p-value was cut at the ceiling."""
        return int((self.df[NEG_LOG10_P] > self.ceiling).sum())

    def equals(self, other: DerivedTable) -> bool:
        """
        Checks value equality with another DerivedTable.

        Args:
            other (DerivedTable): Table to compare against.

        Returns:
            bool: True if frames, ceiling and limits all match.
        """
        return (
            self.ceiling == other.ceiling
            and self.max_abs_estimate == other.max_abs_estimate
            and self.df.equals(other.df)
        )


def derive(
    table: Union[RecordTable, DerivedTable],
    ceiling: float = DEFAULT_CEILING,
) -> DerivedTable:
    """
    Computes -log10 p-values, ceiling-capped p-values and symmetric estimate limits.

    A DerivedTable input is re-derived from its underlying records, so applying
    derive twice with the same ceiling gives the same result.

    Args:
        table (Union[RecordTable, DerivedTable]): Input records.
        ceiling (float): Upper cap for the transformed p-value. Defaults to 15.0.

    Returns:
        DerivedTable: New table; the input is not modified.

    Raises:
        ValueError: If ceiling is not positive.
        EmptyInputError: If the table has no records.
        DomainError: If any p-value is <= 0.
    """
    if isinstance(table, DerivedTable):
        table = table.table
    # Validation
    ceiling = float(ceiling)
    if not ceiling > 0:
        raise ValueError(f"ceiling must be > 0, got {ceiling}")
    if table.n_records == 0:
        raise EmptyInputError("Cannot derive display fields from an empty table")
    pvals = table.df[P_VALUE].to_numpy(dtype=float)
    n_bad = int((pvals <= 0).sum())
    if n_bad:
        raise DomainError(f"{n_bad} p-values are <= 0; -log10 is undefined for them")

    # Transform, cap, and resolve symmetric limits
    df = table.df.copy()
    neg_log = -np.log10(pvals)
    df[NEG_LOG10_P] = neg_log
    df[CAPPED_P] = np.minimum(neg_log, ceiling)
    max_abs = float(np.abs(df[ESTIMATE].to_numpy(dtype=float)).max())

    return DerivedTable(
        table=table,
        df=df,
        ceiling=ceiling,
        max_abs_estimate=max_abs,
    )
