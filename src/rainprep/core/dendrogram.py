"""
rainprep/core/dendrogram
~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy.cluster.hierarchy import dendrogram as scipy_dendrogram
from scipy.cluster.hierarchy import leaves_list

# SciPy places leaf i at 5 + 10 * i in dendrogram coordinates
_SCIPY_LEAF_OFFSET = 5.0
_SCIPY_LEAF_SPACING = 10.0
_ORIENTATIONS = {"top", "left"}


class Segment(NamedTuple):
    """
    One dendrogram line segment in top-down coordinates (x = leaf position, y = height).
    """

    x: float
    y: float
    xend: float
    yend: float


def _build_tree_arrays(Z: np.ndarray, n_leaves: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Build (left_child, right_child, parent) arrays for a SciPy linkage tree.

    Parameters
    ----------
    Z : np.ndarray
        SciPy linkage matrix of shape (n_leaves-1, 4).
    n_leaves : int
        Number of original leaves.

    Returns
    -------
    (left, right, parent) : tuple of np.ndarray
        Arrays of length (n_leaves + Z.shape[0]) where internal node indices are
        `n_leaves + i` for merge row i. Leaves carry -1 children; the root carries
        a -1 parent.
    """
    m = int(Z.shape[0])
    n_nodes = int(n_leaves + m)

    left = np.full(n_nodes, -1, dtype=np.int32)
    right = np.full(n_nodes, -1, dtype=np.int32)
    parent = np.full(n_nodes, -1, dtype=np.int32)

    for i in range(m):
        a = int(Z[i, 0])
        b = int(Z[i, 1])
        node = int(n_leaves + i)
        left[node] = a
        right[node] = b
        parent[a] = node
        parent[b] = node

    return left, right, parent


def _node_heights(Z: np.ndarray, n_leaves: int) -> np.ndarray:
    """Merge height per node; leaves sit at 0."""
    heights = np.zeros(n_leaves + int(Z.shape[0]), dtype=float)
    heights[n_leaves:] = Z[:, 2]
    return heights


def _segments_from_scipy(Z: np.ndarray) -> Tuple[Segment, ...]:
    """
    Converts SciPy dendrogram U-shapes into three segments each.

    Args:
        Z (np.ndarray): SciPy linkage matrix.

    Returns:
        Tuple[Segment, ...]: Segments with leaf positions rescaled to 1..n.
    """
    dendro = scipy_dendrogram(
        Z,
        no_labels=True,
        color_threshold=-1,
        distance_sort=False,
        count_sort=False,
        no_plot=True,
    )
    out: List[Segment] = []
    for icoord, dcoord in zip(dendro["icoord"], dendro["dcoord"]):
        xs = [(x - _SCIPY_LEAF_OFFSET) / _SCIPY_LEAF_SPACING + 1.0 for x in icoord]
        # U-shape: left riser, crossbar, right riser
        out.append(Segment(xs[0], dcoord[0], xs[1], dcoord[1]))
        out.append(Segment(xs[1], dcoord[1], xs[2], dcoord[2]))
        out.append(Segment(xs[2], dcoord[2], xs[3], dcoord[3]))
    return tuple(out)


@dataclass(frozen=True, eq=False)
class Dendrogram:
    """
    Arena-style binary merge tree produced by hierarchical clustering.

    Nodes are integer ids: leaves are 0..n_leaves-1 (input row order) and merge
    row i of the linkage matrix is node n_leaves + i. Children and parents are
    stored as index arrays rather than linked objects.
    """

    labels: np.ndarray
    left: np.ndarray
    right: np.ndarray
    parent: np.ndarray
    heights: np.ndarray
    leaf_order: np.ndarray
    segments: Tuple[Segment, ...]
    linkage_matrix: Optional[np.ndarray] = None

    @classmethod
    def from_linkage(cls, Z: np.ndarray, labels: Sequence[str]) -> Dendrogram:
        """
        Builds a Dendrogram from a SciPy linkage matrix.

        Args:
            Z (np.ndarray): Linkage matrix of shape (n_leaves-1, 4).
            labels (Sequence[str]): Leaf labels in the row order used for linkage.

        Returns:
            Dendrogram: Tree with leaf order and render segments.

        Raises:
            ValueError: If the linkage size does not match the label count.
        """
        Z = np.asarray(Z, dtype=float)
        labels = np.asarray(list(labels), dtype=object)
        n = int(labels.shape[0])
        if Z.ndim != 2 or Z.shape[0] != n - 1 or Z.shape[1] != 4:
            raise ValueError(
                f"Linkage matrix shape {Z.shape} does not match {n} leaf labels"
            )
        left, right, parent = _build_tree_arrays(Z, n)
        return cls(
            labels=labels,
            left=left,
            right=right,
            parent=parent,
            heights=_node_heights(Z, n),
            leaf_order=leaves_list(Z).astype(int),
            segments=_segments_from_scipy(Z),
            linkage_matrix=Z,
        )

    @classmethod
    def empty(cls, labels: Sequence[str] = ()) -> Dendrogram:
        """
        Returns a merge-free tree for zero or one leaf.

        Args:
            labels (Sequence[str]): At most one leaf label. Defaults to ().

        Returns:
            Dendrogram: Tree with no merges and no segments.
        """
        labels = np.asarray(list(labels), dtype=object)
        n = int(labels.shape[0])
        if n > 1:
            raise ValueError("An empty dendrogram holds at most one leaf")
        return cls(
            labels=labels,
            left=np.full(n, -1, dtype=np.int32),
            right=np.full(n, -1, dtype=np.int32),
            parent=np.full(n, -1, dtype=np.int32),
            heights=np.zeros(n, dtype=float),
            leaf_order=np.arange(n, dtype=int),
            segments=(),
        )

    @property
    def n_leaves(self) -> int:
        """Number of leaves."""
        return int(self.labels.shape[0])

    @property
    def n_merges(self) -> int:
        """Number of internal (merge) nodes."""
        return int(self.left.shape[0]) - self.n_leaves

    @property
    def is_empty(self) -> bool:
        """True when the tree has no merges."""
        return self.n_merges == 0

    @property
    def root(self) -> int:
        """Root node id (-1 for a tree without leaves)."""
        if self.n_leaves == 0:
            return -1
        return int(self.left.shape[0]) - 1

    @property
    def ordered_labels(self) -> List[str]:
        """Leaf labels in left-to-right dendrogram order."""
        return [str(x) for x in self.labels[self.leaf_order]]

    def children(self, node: int) -> Tuple[int, int]:
        """
        Returns the (left, right) child ids of a node, (-1, -1) for leaves.

        Args:
            node (int): Node id.

        Returns:
            Tuple[int, int]: Child node ids.
        """
        return int(self.left[node]), int(self.right[node])

    def leaves(self, node: int) -> List[int]:
        """
        Returns leaf ids under `node` in left-to-right order.

        Uses an explicit stack (no recursion) to avoid recursion depth issues.

        Args:
            node (int): Node id.

        Returns:
            List[int]: Leaf ids.
        """
        out: List[int] = []
        stack: List[int] = [int(node)]
        while stack:
            u = stack.pop()
            if u < self.n_leaves:
                out.append(u)
                continue
            # Right pushed first so left is visited first
            stack.append(int(self.right[u]))
            stack.append(int(self.left[u]))
        return out

    def subtree_sizes(self) -> np.ndarray:
        """Number of leaves under each node."""
        sizes = np.zeros(self.left.shape[0], dtype=np.int32)
        sizes[: self.n_leaves] = 1
        # Internal nodes are laid out in increasing merge order.
        for node in range(self.n_leaves, int(self.left.shape[0])):
            sizes[node] = sizes[self.left[node]] + sizes[self.right[node]]
        return sizes

    def to_frame(self, orientation: str = "top") -> pd.DataFrame:
        """
        Exports segments as a DataFrame with columns x, y, xend, yend.

        Args:
            orientation (str): "top" puts leaves along x and heights along y;
                "left" swaps the axes so leaves run along y. Defaults to "top".

        Returns:
            pd.DataFrame: One row per segment.

        Raises:
            ValueError: If orientation is unsupported.
        """
        if orientation not in _ORIENTATIONS:
            raise ValueError(f"orientation must be one of {sorted(_ORIENTATIONS)}")
        df = pd.DataFrame(list(self.segments), columns=list(Segment._fields), dtype=float)
        if orientation == "left":
            df = df.rename(columns={"x": "y", "y": "x", "xend": "yend", "yend": "xend"})
            df = df[list(Segment._fields)]
        return df

    def as_dict(self) -> Dict[str, object]:
        """Serializable view of the arena and segments."""
        return {
            "labels": [str(x) for x in self.labels],
            "left": self.left.tolist(),
            "right": self.right.tolist(),
            "parent": self.parent.tolist(),
            "heights": self.heights.tolist(),
            "leaf_order": self.leaf_order.tolist(),
            "segments": [tuple(s) for s in self.segments],
        }
