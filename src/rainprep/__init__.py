"""
rainprep
~~~~~~~~

Data preparation and axis ordering for rainplots, heatmaps and dendrograms
"""

from .core.table import RecordTable
from .core.derive import derive
from .core.ordering import Ordering, order_by_statistic
from .core.clustering import order_by_cluster, order_responses_by_cluster
from .core.dendrogram import Dendrogram
from .core.pipeline import Pipeline, prepare
from .core.errors import DomainError, EmptyInputError, IncompleteMatrixError

__all__ = [
    "RecordTable",
    "derive",
    "Ordering",
    "order_by_statistic",
    "order_by_cluster",
    "order_responses_by_cluster",
    "Dendrogram",
    "Pipeline",
    "prepare",
    "DomainError",
    "EmptyInputError",
    "IncompleteMatrixError",
]

__version__ = "0.1.0"
