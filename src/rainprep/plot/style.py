"""
rainprep/plot/style
~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Tuple, TypedDict, Union

from matplotlib.colors import Colormap

StyleValue = Union[str, float, int, bool, None, Tuple[float, float], Colormap]


class StyleDefaults(TypedDict):
    """
    Type class for plot style defaults.
    """

    estimate_cmap: Union[str, Colormap]
    point_size_range: Tuple[float, float]
    point_edgecolor: str
    point_lw: float
    tile_edgecolor: str
    tile_lw: float
    dendro_color: str
    dendro_lw: float
    label_fontsize: float
    xtick_rotation: float


DEFAULT_STYLE: StyleDefaults = {
    # Diverging map shared by points and tiles; limits come from the data
    "estimate_cmap": "RdBu_r",
    # Marker area (points^2) for capped -log10 p of 0 and of the ceiling
    "point_size_range": (8.0, 160.0),
    "point_edgecolor": "none",
    "point_lw": 0.0,
    # Heatmap tile borders
    "tile_edgecolor": "white",
    "tile_lw": 0.5,
    "dendro_color": "#888888",
    "dendro_lw": 1.0,
    "label_fontsize": 9,
    "xtick_rotation": 45.0,
}


class StyleConfig:
    """
    Class for storing plot style defaults and overrides.
    """

    def __init__(self, defaults: Optional[Mapping[str, StyleValue]] = None) -> None:
        """
        Initializes the StyleConfig instance.

        Args:
            defaults (Optional[Mapping[str, StyleValue]]): Base style defaults. Defaults to None.
        """
        if defaults is None:
            defaults = DEFAULT_STYLE
        self._defaults: Dict[str, StyleValue] = dict(defaults)
        self._overrides: Dict[str, StyleValue] = {}

    def get(self, key: str, default: Optional[StyleValue] = None) -> StyleValue:
        """
        Gets a style value with override priority.

        Args:
            key (str): Style key.
            default (Optional[StyleValue]): Default value if key not found. Defaults to None.

        Returns:
            StyleValue: Resolved style value.
        """
        if key in self._overrides:
            return self._overrides[key]
        return self._defaults.get(key, default)

    def update(self, overrides: Mapping[str, StyleValue]) -> StyleConfig:
        """
        Applies overrides, rejecting unknown keys.

        Args:
            overrides (Mapping[str, StyleValue]): Mapping of style keys to values.

        Returns:
            StyleConfig: This instance (for chaining).

        Raises:
            KeyError: If a key is not a known style setting.
        """
        unknown = [k for k in overrides if k not in self._defaults]
        if unknown:
            raise KeyError(f"Unknown style keys: {unknown}")
        self._overrides.update(overrides)
        return self

    def resolve(self, key: str, override: Optional[StyleValue]) -> StyleValue:
        """Per-call override if given, otherwise the configured value."""
        return override if override is not None else self.get(key)

    def __getitem__(self, key: str) -> StyleValue:
        return self.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._overrides or key in self._defaults
