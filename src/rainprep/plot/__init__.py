"""
rainprep/plot
~~~~~~~~~~~~~
"""

from .dendrogram import draw_dendrogram
from .heatmap import draw_heatmap, estimate_grid
from .rainplot import draw_rainplot
from .style import DEFAULT_STYLE, StyleConfig

__all__ = [
    "draw_rainplot",
    "draw_heatmap",
    "estimate_grid",
    "draw_dendrogram",
    "StyleConfig",
    "DEFAULT_STYLE",
]
