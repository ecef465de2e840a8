"""
rainprep/core/clustering
~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import List, NamedTuple, Union

import numpy as np
import pandas as pd
from scipy.cluster.hierarchy import linkage, optimal_leaf_ordering
from scipy.spatial.distance import pdist, squareform

from .derive import DerivedTable
from .dendrogram import Dendrogram
from .errors import EmptyInputError
from .ordering import Ordering, _check_permutation
from .table import ESTIMATE, RecordTable
from ..util.warnings import warn

# Linkage methods whose merge heights are only meaningful for Euclidean distances
_EUCLIDEAN_ONLY_METHODS = {"ward", "centroid", "median"}
# Relative slack under which two Ward merge costs count as tied
_TIE_TOL = 1e-12


class ClusterOrdering(NamedTuple):
    """
    Leaf order of a clustered axis together with the dendrogram that produced it.
    """

    ordering: Ordering
    dendrogram: Dendrogram


def _ward_linkage(values: np.ndarray) -> np.ndarray:
    """
    Agglomerates rows by Ward's minimum variance criterion.

    Each merge height is the increase in within-cluster sum of squares, so two
    single rows at Euclidean distance d merge at d**2 / 2. Candidate pairs of
    active cluster ids (a, b) with a < b are scanned in ascending order and the
    first strict minimum wins, which makes tied inputs resolve reproducibly.
    Costs of a merged cluster are updated with the Lance-Williams recurrence.

    Args:
        values (np.ndarray): Observations, one row per leaf (at least two rows).

    Returns:
        np.ndarray: Linkage matrix in SciPy layout, rows [a, b, height, size].
    """
    n = int(values.shape[0])
    n_nodes = 2 * n - 1
    cost = np.full((n_nodes, n_nodes), np.inf)
    cost[:n, :n] = squareform(pdist(values, metric="sqeuclidean")) / 2.0
    size = np.zeros(n_nodes, dtype=float)
    size[:n] = 1.0
    # Node ids only grow, so appending keeps `active` sorted
    active = list(range(n))
    Z = np.zeros((n - 1, 4), dtype=float)

    for step in range(n - 1):
        ids = np.asarray(active)
        rows, cols = np.triu_indices(ids.shape[0], k=1)
        pair_costs = cost[ids[rows], ids[cols]]
        lowest = float(pair_costs.min())
        slack = _TIE_TOL * max(1.0, abs(lowest))
        first = int(np.flatnonzero(pair_costs <= lowest + slack)[0])
        a, b = int(ids[rows[first]]), int(ids[cols[first]])
        height = float(pair_costs[first])

        node = n + step
        na, nb = size[a], size[b]
        active.remove(a)
        active.remove(b)
        if active:
            rest = np.asarray(active)
            nk = size[rest]
            updated = (
                (na + nk) * cost[rest, a] + (nb + nk) * cost[rest, b] - nk * height
            ) / (na + nb + nk)
            # Rounding can push a zero-cost update slightly negative
            updated = np.maximum(updated, 0.0)
            cost[rest, node] = updated
            cost[node, rest] = updated
        size[node] = na + nb
        active.append(node)
        Z[step] = [a, b, height, na + nb]

    return Z


def compute_linkage(
    matrix: pd.DataFrame,
    *,
    linkage_method: str = "ward",
    linkage_metric: str = "euclidean",
    optimal_ordering: bool = False,
) -> np.ndarray:
    """
    Computes a SciPy-format linkage matrix over the rows of `matrix`.

    Ward linkage is built by `_ward_linkage`: heights are merge costs (increase
    in within-cluster sum of squares) and equal-cost merges go to the
    lexicographically first pair of cluster ids. Other methods are delegated to
    SciPy's `linkage` over pairwise row distances.

    Args:
        matrix (pd.DataFrame): Complete numeric matrix; rows are clustered.

    Kwargs:
        linkage_method (str): Linkage method for hierarchical clustering. Defaults to "ward".
        linkage_metric (str): Distance metric for hierarchical clustering. Defaults to "euclidean".
        optimal_ordering (bool): Whether to reorder leaves to minimise adjacent distances.
            Defaults to False.

    Returns:
        np.ndarray: Linkage matrix of shape (n_rows - 1, 4).

    Raises:
        ValueError: If fewer than two rows are given or method and metric are incompatible.
    """
    # Validation
    if matrix.shape[0] < 2:
        raise ValueError("Linkage requires at least two rows")
    if linkage_method in _EUCLIDEAN_ONLY_METHODS and linkage_metric != "euclidean":
        raise ValueError(
            f"linkage_method={linkage_method!r} requires linkage_metric='euclidean'"
        )
    values = matrix.to_numpy(dtype=float)
    distances = pdist(values, metric=linkage_metric)
    if linkage_method == "ward":
        Z = _ward_linkage(values)
        if optimal_ordering:
            Z = optimal_leaf_ordering(Z, distances)
        return Z
    return linkage(
        distances,
        method=linkage_method,
        optimal_ordering=optimal_ordering,
    )


def _cluster_axis(
    matrix: pd.DataFrame,
    labels: List[str],
    *,
    linkage_method: str,
    linkage_metric: str,
    optimal_ordering: bool,
) -> ClusterOrdering:
    """
    Clusters the rows of `matrix` (indexed by `labels`) into an ordering and dendrogram.

    Args:
        matrix (pd.DataFrame): Complete matrix whose rows are the labels.
        labels (List[str]): Row labels in canonical order.

    Kwargs:
        linkage_method (str): Linkage method.
        linkage_metric (str): Distance metric.
        optimal_ordering (bool): SciPy optimal leaf ordering flag.

    Returns:
        ClusterOrdering: Ordering plus dendrogram.
    """
    method = f"cluster_{linkage_method}"
    # Trivial single-label axis: clustering is undefined, order is the label itself
    if len(labels) == 1:
        return ClusterOrdering(Ordering(tuple(labels), method=method), Dendrogram.empty(labels))

    Z = compute_linkage(
        matrix,
        linkage_method=linkage_method,
        linkage_metric=linkage_metric,
        optimal_ordering=optimal_ordering,
    )
    dendro = Dendrogram.from_linkage(Z, labels)
    ordering = Ordering(tuple(dendro.ordered_labels), method=method)
    return ClusterOrdering(_check_permutation(ordering, labels), dendro)


def order_by_cluster(
    table: Union[RecordTable, DerivedTable],
    *,
    linkage_method: str = "ward",
    linkage_metric: str = "euclidean",
    optimal_ordering: bool = False,
) -> ClusterOrdering:
    """
    Orders terms by hierarchical clustering of their per-response estimates.

    The records are pivoted into a term x response estimate matrix, Euclidean
    distances between term rows are clustered with Ward linkage, and the
    dendrogram leaf order becomes the term order. A single-term table returns
    that term with an empty dendrogram.

    Args:
        table (Union[RecordTable, DerivedTable]): Input records.

    Kwargs:
        linkage_method (str): Linkage method for hierarchical clustering. Defaults to "ward".
        linkage_metric (str): Distance metric for hierarchical clustering. Defaults to "euclidean".
        optimal_ordering (bool): Whether to apply SciPy optimal leaf ordering. Defaults to False.

    Returns:
        ClusterOrdering: (ordering, dendrogram) named tuple.

    Raises:
        EmptyInputError: If the table has no terms.
        IncompleteMatrixError: If any (term, response) estimate is missing.
    """
    if isinstance(table, DerivedTable):
        table = table.table
    terms = table.terms
    if not terms:
        raise EmptyInputError("Cannot cluster terms of an empty table")
    matrix = table.pivot(values=ESTIMATE)

    return _cluster_axis(
        matrix,
        terms,
        linkage_method=linkage_method,
        linkage_metric=linkage_metric,
        optimal_ordering=optimal_ordering,
    )


def order_responses_by_cluster(
    table: Union[RecordTable, DerivedTable],
    *,
    linkage_method: str = "ward",
    linkage_metric: str = "euclidean",
    optimal_ordering: bool = False,
) -> ClusterOrdering:
    """
    Orders responses by clustering the transposed estimate matrix (visual grouping only).

    Args:
        table (Union[RecordTable, DerivedTable]): Input records.

    Kwargs:
        linkage_method (str): Linkage method for hierarchical clustering. Defaults to "ward".
        linkage_metric (str): Distance metric for hierarchical clustering. Defaults to "euclidean".
        optimal_ordering (bool): Whether to apply SciPy optimal leaf ordering. Defaults to False.

    Returns:
        ClusterOrdering: (ordering, dendrogram) over responses.

    Raises:
        EmptyInputError: If the table has no responses.
        IncompleteMatrixError: If any (term, response) estimate is missing.
    """
    if isinstance(table, DerivedTable):
        table = table.table
    responses = table.responses
    if not responses:
        raise EmptyInputError("Cannot cluster responses of an empty table")
    if len(responses) == 1:
        warn("Only one response present; response clustering returns it unchanged", stacklevel=3)
    matrix = table.pivot(values=ESTIMATE).T

    return _cluster_axis(
        matrix,
        responses,
        linkage_method=linkage_method,
        linkage_metric=linkage_metric,
        optimal_ordering=optimal_ordering,
    )
