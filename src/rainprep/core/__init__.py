"""
rainprep/core
~~~~~~~~~~~~~
"""

from .clustering import ClusterOrdering, compute_linkage, order_by_cluster, order_responses_by_cluster
from .dendrogram import Dendrogram, Segment
from .derive import DerivedTable, derive
from .errors import DomainError, EmptyInputError, IncompleteMatrixError, RainprepError
from .ordering import Ordering, order_by_statistic
from .pipeline import Pipeline, PreparedTable, prepare
from .table import RecordTable

__all__ = [
    "RecordTable",
    "DerivedTable",
    "derive",
    "Ordering",
    "order_by_statistic",
    "ClusterOrdering",
    "compute_linkage",
    "order_by_cluster",
    "order_responses_by_cluster",
    "Dendrogram",
    "Segment",
    "Pipeline",
    "PreparedTable",
    "prepare",
    "RainprepError",
    "DomainError",
    "EmptyInputError",
    "IncompleteMatrixError",
]
