"""
rainprep/plot/_axes
~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Tuple

import matplotlib.pyplot as plt
from matplotlib.colors import Normalize

if TYPE_CHECKING:
    from ..core.pipeline import PreparedTable


def symmetric_norm(limits: Tuple[float, float]) -> Normalize:
    """
    Builds a colour normalization centred on zero from symmetric limits.

    Args:
        limits (Tuple[float, float]): (-max|estimate|, +max|estimate|).

    Returns:
        Normalize: Normalization over the limits, or over (-1, 1) when all estimates are 0.
    """
    lo, hi = limits
    if hi <= 0:
        return Normalize(vmin=-1.0, vmax=1.0)
    return Normalize(vmin=lo, vmax=hi)


def set_grid_axes(
    ax: plt.Axes,
    prepared: PreparedTable,
    *,
    fontsize: float,
    rotation: float,
) -> None:
    """
    Labels a term x response grid axis; the first term sits at the top.

    Args:
        ax (plt.Axes): Target axis.
        prepared (PreparedTable): Prepared table providing both orderings.

    Kwargs:
        fontsize (float): Tick label font size.
        rotation (float): Response tick label rotation in degrees.
    """
    n_terms, n_responses = prepared.shape
    ax.set_xlim(-0.5, n_responses - 0.5)
    ax.set_ylim(n_terms - 0.5, -0.5)
    ax.set_xticks(range(n_responses))
    ax.set_xticklabels(
        list(prepared.response_ordering.labels),
        rotation=rotation,
        ha="right" if rotation else "center",
        fontsize=fontsize,
    )
    ax.set_yticks(range(n_terms))
    ax.set_yticklabels(list(prepared.term_ordering.labels), fontsize=fontsize)
