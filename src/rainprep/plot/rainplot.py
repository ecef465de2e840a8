"""
rainprep/plot/rainplot
~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import Optional, Tuple, TYPE_CHECKING, Union

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.collections import PathCollection
from matplotlib.colors import Colormap

from ._axes import set_grid_axes, symmetric_norm
from .style import StyleConfig
from ..core.derive import CAPPED_P
from ..core.pipeline import RESPONSE_POS, TERM_POS
from ..core.table import ESTIMATE

if TYPE_CHECKING:
    from ..core.pipeline import PreparedTable


def _scale_sizes(
    capped: np.ndarray,
    ceiling: float,
    size_range: Tuple[float, float],
) -> np.ndarray:
    """
    Maps capped -log10 p-values linearly onto marker areas.

    Args:
        capped (np.ndarray): Capped -log10 p-values.
        ceiling (float): Cap used during derivation.
        size_range (Tuple[float, float]): Marker area at 0 and at the ceiling.

    Returns:
        np.ndarray: Marker areas.
    """
    lo, hi = size_range
    frac = np.clip(np.asarray(capped, dtype=float) / float(ceiling), 0.0, 1.0)
    return lo + (hi - lo) * frac


def draw_rainplot(
    ax: plt.Axes,
    prepared: PreparedTable,
    *,
    style: Optional[StyleConfig] = None,
    cmap: Optional[Union[str, Colormap]] = None,
    size_range: Optional[Tuple[float, float]] = None,
) -> PathCollection:
    """
    Draws one point per record: size by capped -log10 p, colour by estimate.

    Args:
        ax (plt.Axes): Target axis.
        prepared (PreparedTable): Prepared table.

    Kwargs:
        style (Optional[StyleConfig]): Style configuration. Defaults to None.
        cmap (Optional[Union[str, Colormap]]): Colormap override. Defaults to None.
        size_range (Optional[Tuple[float, float]]): Marker area override. Defaults to None.

    Returns:
        PathCollection: Scatter artist (usable as a colorbar mappable).
    """
    style = style if style is not None else StyleConfig()
    df = prepared.frame
    sizes = _scale_sizes(
        df[CAPPED_P].to_numpy(),
        prepared.ceiling,
        style.resolve("point_size_range", size_range),
    )
    artist = ax.scatter(
        df[RESPONSE_POS].to_numpy(),
        df[TERM_POS].to_numpy(),
        s=sizes,
        c=df[ESTIMATE].to_numpy(),
        cmap=style.resolve("estimate_cmap", cmap),
        norm=symmetric_norm(prepared.limits),
        edgecolors=style["point_edgecolor"],
        linewidths=style["point_lw"],
    )
    set_grid_axes(
        ax,
        prepared,
        fontsize=style["label_fontsize"],
        rotation=style["xtick_rotation"],
    )
    return artist
