"""
rainprep/plot/heatmap
~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING, Union

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.collections import QuadMesh
from matplotlib.colors import Colormap

from ._axes import set_grid_axes, symmetric_norm
from .style import StyleConfig
from ..core.pipeline import RESPONSE_POS, TERM_POS
from ..core.table import ESTIMATE

if TYPE_CHECKING:
    from ..core.pipeline import PreparedTable


def estimate_grid(prepared: PreparedTable) -> np.ndarray:
    """
    Lays estimates out as a (n_terms, n_responses) grid in display order.

    Args:
        prepared (PreparedTable): Prepared table.

    Returns:
        np.ndarray: Grid with NaN where a (term, response) record is absent.
    """
    n_terms, n_responses = prepared.shape
    grid = np.full((n_terms, n_responses), np.nan, dtype=float)
    df = prepared.frame
    grid[df[TERM_POS].to_numpy(), df[RESPONSE_POS].to_numpy()] = df[ESTIMATE].to_numpy()
    return grid


def draw_heatmap(
    ax: plt.Axes,
    prepared: PreparedTable,
    *,
    style: Optional[StyleConfig] = None,
    cmap: Optional[Union[str, Colormap]] = None,
) -> QuadMesh:
    """
    Draws estimate tiles in the prepared term and response order.

    Args:
        ax (plt.Axes): Target axis.
        prepared (PreparedTable): Prepared table.

    Kwargs:
        style (Optional[StyleConfig]): Style configuration. Defaults to None.
        cmap (Optional[Union[str, Colormap]]): Colormap override. Defaults to None.

    Returns:
        QuadMesh: Tile artist (usable as a colorbar mappable).
    """
    style = style if style is not None else StyleConfig()
    grid = estimate_grid(prepared)
    n_terms, n_responses = grid.shape
    # Tile edges at half-integers so tiles centre on integer axis positions
    artist = ax.pcolormesh(
        np.arange(n_responses + 1) - 0.5,
        np.arange(n_terms + 1) - 0.5,
        np.ma.masked_invalid(grid),
        cmap=style.resolve("estimate_cmap", cmap),
        norm=symmetric_norm(prepared.limits),
        edgecolors=style["tile_edgecolor"],
        linewidth=style["tile_lw"],
    )
    set_grid_axes(
        ax,
        prepared,
        fontsize=style["label_fontsize"],
        rotation=style["xtick_rotation"],
    )
    return artist
