"""
rainprep/core/ordering
~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .derive import DerivedTable
from .errors import EmptyInputError
from .table import ESTIMATE, P_VALUE, TERM, RecordTable

_STATISTICS = {ESTIMATE, P_VALUE}
_AGGREGATIONS = {"mean", "median", "min", "max"}


@dataclass(frozen=True)
class Ordering:
    """
    Data class for an explicit display order (permutation) over categorical labels.

    The order travels alongside the data; applying it returns a new frame with an
    ordered categorical column instead of mutating the caller's column.
    """

    labels: Tuple[str, ...]
    method: str = "input"
    position: Dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        labels = tuple(str(x) for x in self.labels)
        if len(set(labels)) != len(labels):
            raise ValueError("Ordering labels must be unique")
        object.__setattr__(self, "labels", labels)
        object.__setattr__(self, "position", {lab: i for i, lab in enumerate(labels)})

    def __len__(self) -> int:
        return len(self.labels)

    def __iter__(self):
        return iter(self.labels)

    def is_permutation_of(self, labels: Iterable[str]) -> bool:
        """
        Checks that this ordering covers exactly the given label set.

        Args:
            labels (Iterable[str]): Expected labels.

        Returns:
            bool: True if the sets match and no label is repeated.
        """
        expected = list(labels)
        return len(expected) == len(self.labels) and set(expected) == set(self.labels)

    def codes(self, values: Sequence[str]) -> np.ndarray:
        """
        Maps labels to integer axis positions (0-based).

        Args:
            values (Sequence[str]): Labels to map.

        Returns:
            np.ndarray: Integer positions aligned to `values`.

        Raises:
            KeyError: If a value is not part of the ordering.
        """
        return np.asarray([self.position[str(v)] for v in values], dtype=int)

    def apply(self, df: pd.DataFrame, column: str = TERM) -> pd.DataFrame:
        """
        Returns a copy of `df` with `column` as an ordered categorical.

        Args:
            df (pd.DataFrame): Frame holding the column.
            column (str): Column to order. Defaults to "term".

        Returns:
            pd.DataFrame: New frame; `df` is left untouched.

        Raises:
            ValueError: If the column holds labels outside the ordering.
        """
        unknown = set(df[column].astype(str)) - set(self.labels)
        if unknown:
            raise ValueError(f"Labels not covered by the ordering: {sorted(unknown)}")
        out = df.copy()
        out[column] = pd.Categorical(
            out[column].astype(str),
            categories=list(self.labels),
            ordered=True,
        )
        return out


def _check_permutation(ordering: Ordering, expected: Sequence[str]) -> Ordering:
    """Raise if an ordering dropped or added labels."""
    if not ordering.is_permutation_of(expected):
        raise RuntimeError(
            f"{ordering.method} ordering is not a permutation of the input labels"
        )
    return ordering


def order_by_statistic(
    table: Union[RecordTable, DerivedTable],
    statistic: str = P_VALUE,
    agg: str = "mean",
    *,
    ascending: bool = True,
) -> Ordering:
    """
    Orders terms by an aggregated per-term statistic.

    By default terms are sorted ascending by their mean raw p-value across
    responses. Ties keep the order in which terms first appear.

    Args:
        table (Union[RecordTable, DerivedTable]): Input records.
        statistic (str): Record column to aggregate, "p_value" or "estimate".
            Defaults to "p_value".
        agg (str): Aggregation, one of {"mean", "median", "min", "max"}.
            Defaults to "mean".

    Kwargs:
        ascending (bool): Sort direction. Defaults to True.

    Returns:
        Ordering: Term order.

    Raises:
        ValueError: If statistic or agg is unsupported.
        EmptyInputError: If the table has no records.
    """
    if isinstance(table, DerivedTable):
        table = table.table
    # Validation
    if statistic not in _STATISTICS:
        raise ValueError(f"statistic must be one of {sorted(_STATISTICS)}")
    if agg not in _AGGREGATIONS:
        raise ValueError(f"agg must be one of {sorted(_AGGREGATIONS)}")
    if table.n_records == 0:
        raise EmptyInputError("Cannot order terms of an empty table")

    # Aggregate in first-appearance order, then stable-sort
    scores = table.df.groupby(TERM, sort=False)[statistic].agg(agg)
    scores = scores.sort_values(ascending=ascending, kind="mergesort")
    ordering = Ordering(tuple(scores.index), method=f"{agg}_{statistic}")
    return _check_permutation(ordering, table.terms)
