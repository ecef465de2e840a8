"""
rainprep/core/pipeline
~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import pandas as pd

from .clustering import ClusterOrdering, order_by_cluster, order_responses_by_cluster
from .dendrogram import Dendrogram
from .derive import DEFAULT_CEILING, DerivedTable, derive
from .ordering import Ordering, order_by_statistic
from .table import RESPONSE, TERM, RecordTable

TERM_POS = "term_pos"
RESPONSE_POS = "response_pos"
_TERM_STRATEGIES = {"statistic", "cluster"}
_RESPONSE_STRATEGIES = {"input", "cluster"}


@dataclass(frozen=True, eq=False)
class PreparedTable:
    """
    Data class for a derived, ordered table ready for a rendering collaborator.
    """

    frame: pd.DataFrame
    derived: DerivedTable
    term_ordering: Ordering
    response_ordering: Ordering
    dendrogram: Optional[Dendrogram] = None
    response_dendrogram: Optional[Dendrogram] = None

    @property
    def limits(self) -> Tuple[float, float]:
        """Symmetric estimate limits for colour scales."""
        return self.derived.limits

    @property
    def breaks(self) -> Tuple[float, ...]:
        """Estimate scale breakpoints."""
        return self.derived.breaks

    @property
    def ceiling(self) -> float:
        """Cap applied to -log10 p-values."""
        return self.derived.ceiling

    @property
    def shape(self) -> Tuple[int, int]:
        """(n_terms, n_responses) of the display grid."""
        return len(self.term_ordering), len(self.response_ordering)


def _assemble_frame(
    derived: DerivedTable,
    term_ordering: Ordering,
    response_ordering: Ordering,
) -> pd.DataFrame:
    """
    Applies both orderings and adds integer axis positions.

    Args:
        derived (DerivedTable): Derived records.
        term_ordering (Ordering): Term display order.
        response_ordering (Ordering): Response display order.

    Returns:
        pd.DataFrame: Ordered frame sorted by term then response position.
    """
    df = term_ordering.apply(derived.df, column=TERM)
    df = response_ordering.apply(df, column=RESPONSE)
    df[TERM_POS] = term_ordering.codes(df[TERM].astype(str))
    df[RESPONSE_POS] = response_ordering.codes(df[RESPONSE].astype(str))
    return df.sort_values([TERM_POS, RESPONSE_POS], kind="mergesort").reset_index(drop=True)


class Pipeline:
    """
    Class for orchestrating derivation and axis ordering over a record table.
    """

    def __init__(self, table: RecordTable) -> None:
        """
        Initializes the Pipeline instance.

        Args:
            table (RecordTable): Input records.
        """
        self.table = table
        self.derived: Optional[DerivedTable] = None
        self.term_ordering: Optional[Ordering] = None
        self.response_ordering: Optional[Ordering] = None
        self.dendrogram: Optional[Dendrogram] = None
        self.response_dendrogram: Optional[Dendrogram] = None
        self.result: Optional[PreparedTable] = None
        self._cluster_cache: Dict[Tuple[str, str, str, bool], ClusterOrdering] = {}

    def derive(self, ceiling: float = DEFAULT_CEILING) -> Pipeline:
        """
        Computes capped -log10 p-values and symmetric estimate limits.

        Args:
            ceiling (float): Cap for -log10 p-values. Defaults to 15.0.

        Returns:
            Pipeline: The Pipeline instance (for method chaining).
        """
        self.result = None
        self.derived = derive(self.table, ceiling)
        return self

    def order(
        self,
        by: str = "statistic",
        *,
        statistic: str = "p_value",
        agg: str = "mean",
        ascending: bool = True,
        linkage_method: str = "ward",
        linkage_metric: str = "euclidean",
        optimal_ordering: bool = False,
    ) -> Pipeline:
        """
        Orders the term axis.

        Args:
            by (str): "statistic" (aggregated per-term value) or "cluster"
                (dendrogram leaf order). Defaults to "statistic".

        Kwargs:
            statistic (str): Column aggregated in statistic mode. Defaults to "p_value".
            agg (str): Aggregation in statistic mode. Defaults to "mean".
            ascending (bool): Sort direction in statistic mode. Defaults to True.
            linkage_method (str): Linkage method in cluster mode. Defaults to "ward".
            linkage_metric (str): Distance metric in cluster mode. Defaults to "euclidean".
            optimal_ordering (bool): SciPy optimal leaf ordering in cluster mode.
                Defaults to False.

        Returns:
            Pipeline: The Pipeline instance (for method chaining).

        Raises:
            ValueError: If `by` is unsupported.
        """
        if by not in _TERM_STRATEGIES:
            raise ValueError(f"by must be one of {sorted(_TERM_STRATEGIES)}")
        self.result = None
        if by == "statistic":
            self.term_ordering = order_by_statistic(
                self.table, statistic, agg, ascending=ascending
            )
            self.dendrogram = None
            return self

        clustered = self._clustered(
            TERM,
            linkage_method=linkage_method,
            linkage_metric=linkage_metric,
            optimal_ordering=optimal_ordering,
        )
        self.term_ordering, self.dendrogram = clustered
        return self

    def order_responses(
        self,
        by: str = "input",
        *,
        linkage_method: str = "ward",
        linkage_metric: str = "euclidean",
        optimal_ordering: bool = False,
    ) -> Pipeline:
        """
        Orders the response axis.

        Args:
            by (str): "input" (first appearance) or "cluster". Defaults to "input".

        Kwargs:
            linkage_method (str): Linkage method in cluster mode. Defaults to "ward".
            linkage_metric (str): Distance metric in cluster mode. Defaults to "euclidean".
            optimal_ordering (bool): SciPy optimal leaf ordering in cluster mode.
                Defaults to False.

        Returns:
            Pipeline: The Pipeline instance (for method chaining).

        Raises:
            ValueError: If `by` is unsupported.
        """
        if by not in _RESPONSE_STRATEGIES:
            raise ValueError(f"by must be one of {sorted(_RESPONSE_STRATEGIES)}")
        self.result = None
        if by == "input":
            self.response_ordering = Ordering(tuple(self.table.responses), method="input")
            self.response_dendrogram = None
            return self

        clustered = self._clustered(
            RESPONSE,
            linkage_method=linkage_method,
            linkage_metric=linkage_metric,
            optimal_ordering=optimal_ordering,
        )
        self.response_ordering, self.response_dendrogram = clustered
        return self

    def _clustered(
        self,
        axis: str,
        *,
        linkage_method: str,
        linkage_metric: str,
        optimal_ordering: bool,
    ) -> ClusterOrdering:
        """Cluster one axis, reusing earlier results for identical settings."""
        cache_key = (axis, linkage_method, linkage_metric, bool(optimal_ordering))
        cached = self._cluster_cache.get(cache_key)
        if cached is None:
            fn = order_by_cluster if axis == TERM else order_responses_by_cluster
            cached = fn(
                self.table,
                linkage_method=linkage_method,
                linkage_metric=linkage_metric,
                optimal_ordering=optimal_ordering,
            )
            self._cluster_cache[cache_key] = cached
        return cached

    def finalize(self) -> Pipeline:
        """
        Applies orderings to the derived table and attaches a PreparedTable as `result`.

        Responses keep their input order unless order_responses() was called.

        Returns:
            Pipeline: The Pipeline instance (for method chaining).

        Raises:
            RuntimeError: If derive() or order() has not been called.
        """
        # Validation
        if self.derived is None or self.term_ordering is None:
            raise RuntimeError("derive() and order() must be called before finalize()")
        if self.response_ordering is None:
            self.order_responses("input")

        self.result = PreparedTable(
            frame=_assemble_frame(self.derived, self.term_ordering, self.response_ordering),
            derived=self.derived,
            term_ordering=self.term_ordering,
            response_ordering=self.response_ordering,
            dendrogram=self.dendrogram,
            response_dendrogram=self.response_dendrogram,
        )
        return self


def prepare(
    table: RecordTable,
    *,
    ceiling: float = DEFAULT_CEILING,
    order_by: str = "statistic",
    cluster_responses: bool = False,
    linkage_method: str = "ward",
    linkage_metric: str = "euclidean",
) -> PreparedTable:
    """
    Runs derive, term ordering and response ordering in a single call.

    Equivalent to Pipeline(table).derive(ceiling).order(order_by).order_responses(...)
    followed by finalize().

    Args:
        table (RecordTable): Input records.

    Kwargs:
        ceiling (float): Cap for -log10 p-values. Defaults to 15.0.
        order_by (str): Term ordering, "statistic" or "cluster". Defaults to "statistic".
        cluster_responses (bool): Cluster responses instead of keeping input order.
            Defaults to False.
        linkage_method (str): Linkage method for any clustering. Defaults to "ward".
        linkage_metric (str): Distance metric for any clustering. Defaults to "euclidean".

    Returns:
        PreparedTable: Derived frame in display order with orderings and dendrograms.

    Raises:
        ValueError: If the ceiling or ordering strategy is invalid.
        DomainError: If any p-value is not positive.
        EmptyInputError: If the table has no records.
        IncompleteMatrixError: If clustering needs a missing (term, response) estimate.
    """
    pipeline = (
        Pipeline(table)
        .derive(ceiling)
        .order(order_by, linkage_method=linkage_method, linkage_metric=linkage_metric)
        .order_responses(
            "cluster" if cluster_responses else "input",
            linkage_method=linkage_method,
            linkage_metric=linkage_metric,
        )
        .finalize()
    )
    return pipeline.result
