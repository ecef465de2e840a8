"""
rainprep/plot/dendrogram
~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection

from .style import StyleConfig

if TYPE_CHECKING:
    from ..core.dendrogram import Dendrogram


def _finalize_dendrogram_axis(
    ax: plt.Axes,
    n_leaves: int,
    orientation: str,
) -> None:
    """
    Aligns leaf positions with grid rows/columns and hides ticks and spines.

    Args:
        ax (plt.Axes): Dendrogram axis.
        n_leaves (int): Number of leaves.
        orientation (str): "top" or "left".
    """
    if orientation == "left":
        # Leaves follow the heatmap rows (first row on top); root on the left
        ax.set_ylim(n_leaves - 0.5, -0.5)
        ax.invert_xaxis()
    else:
        ax.set_xlim(-0.5, n_leaves - 0.5)
    ax.set_xticks([])
    ax.set_yticks([])
    for spine in ax.spines.values():
        spine.set_visible(False)


def draw_dendrogram(
    ax: plt.Axes,
    dendrogram: Dendrogram,
    *,
    orientation: str = "left",
    style: Optional[StyleConfig] = None,
    color: Optional[str] = None,
    linewidth: Optional[float] = None,
) -> Optional[LineCollection]:
    """
    Draws dendrogram segments so leaves line up with grid positions 0..n-1.

    Args:
        ax (plt.Axes): Target axis.
        dendrogram (Dendrogram): Tree to draw.

    Kwargs:
        orientation (str): "left" (beside term rows) or "top" (above columns).
            Defaults to "left".
        style (Optional[StyleConfig]): Style configuration. Defaults to None.
        color (Optional[str]): Line colour override. Defaults to None.
        linewidth (Optional[float]): Line width override. Defaults to None.

    Returns:
        Optional[LineCollection]: Segment artist, or None for a merge-free tree.
    """
    style = style if style is not None else StyleConfig()
    seg = dendrogram.to_frame(orientation=orientation)
    # Segment leaf coordinates are 1-based; grid positions are 0-based
    leaf_cols = ["y", "yend"] if orientation == "left" else ["x", "xend"]
    seg[leaf_cols] = seg[leaf_cols] - 1.0

    artist = None
    if not seg.empty:
        lines = [((r.x, r.y), (r.xend, r.yend)) for r in seg.itertuples(index=False)]
        artist = LineCollection(
            lines,
            colors=style.resolve("dendro_color", color),
            linewidths=style.resolve("dendro_lw", linewidth),
        )
        ax.add_collection(artist)
        ax.autoscale_view()
    _finalize_dendrogram_axis(ax, dendrogram.n_leaves, orientation)
    return artist
