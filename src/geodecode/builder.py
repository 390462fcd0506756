"""
K-d tree builder using median partitioning.

This module constructs a balanced k-d tree from a fixed set of index
keys. Each level splits on the median along an alternating dimension;
the median is found with an in-place selection rather than a sort, so
a build costs O(n log n) expected time.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from .kdtree import KDNode, KDTree, DIMENSIONS
from .models import IndexKey


SpatialIndex = Union[KDTree, IndexKey]


@dataclass
class BuilderStats:
    """Statistics collected during tree building."""

    nodes_created: int = 0
    leaves_created: int = 0
    max_depth_reached: int = 0


def _partition3(
    keys: List[IndexKey], lo: int, hi: int, dim: int, pivot: float
) -> Tuple[int, int]:
    """
    Three-way partition keys[lo:hi] around `pivot` on `dim`.

    Afterwards keys[lo:lt] < pivot, keys[lt:gt+1] == pivot and
    keys[gt+1:hi] > pivot.

    Returns:
        Tuple of (lt, gt)
    """
    lt, i, gt = lo, lo, hi - 1
    while i <= gt:
        v = keys[i].coord[dim]
        if v < pivot:
            keys[lt], keys[i] = keys[i], keys[lt]
            lt += 1
            i += 1
        elif v > pivot:
            keys[i], keys[gt] = keys[gt], keys[i]
            gt -= 1
        else:
            i += 1
    return lt, gt


def select(keys: List[IndexKey], lo: int, hi: int, k: int, dim: int) -> None:
    """
    Quickselect: reorder keys[lo:hi] so that keys[k] holds the k-th value on `dim`.

    Afterwards every key in keys[lo:k] is <= keys[k] and every key in
    keys[k+1:hi] is >= keys[k]. Runs of equal values are grouped by the
    three-way partition, so identical coordinates stay linear.
    """
    if not lo <= k < hi:
        raise ValueError(f"k={k} outside range [{lo}, {hi})")

    while hi - lo > 1:
        pivot = keys[(lo + hi) // 2].coord[dim]
        lt, gt = _partition3(keys, lo, hi, dim, pivot)
        if k < lt:
            hi = lt
        elif k > gt:
            lo = gt + 1
        else:
            return


class KDTreeBuilder:
    """
    Builder for balanced k-d trees.

    The builder constructs a tree by:
    1. Picking the split dimension from the depth (lat, lon, lat, ...)
    2. Selecting the median key of the current range on that dimension
    3. Recursing on the keys left and right of the median
    """

    def __init__(self):
        self.stats = BuilderStats()

    def build(self, keys: Sequence[IndexKey]) -> KDTree:
        """
        Build a k-d tree over the given keys.

        The input sequence is not modified.

        Args:
            keys: Non-empty sequence of index keys

        Returns:
            KDTree containing every key
        """
        if not keys:
            raise ValueError("Cannot build a k-d tree from no keys")

        self.stats = BuilderStats()  # Reset stats
        work = list(keys)
        root = self._build_node(work, 0, len(work), depth=0)
        return KDTree(root, len(work))

    def _build_node(
        self, keys: List[IndexKey], lo: int, hi: int, depth: int
    ) -> Optional[KDNode]:
        """
        Build the subtree for keys[lo:hi].

        Args:
            keys: Working list, reordered in place
            lo: Start of the range (inclusive)
            hi: End of the range (exclusive)
            depth: Current depth in the tree

        Returns:
            KDNode for the range, or None if it is empty
        """
        if lo >= hi:
            return None

        self.stats.max_depth_reached = max(self.stats.max_depth_reached, depth)
        self.stats.nodes_created += 1
        dim = depth % DIMENSIONS

        # Base case: single key is a leaf
        if hi - lo == 1:
            self.stats.leaves_created += 1
            return KDNode(keys[lo], dim)

        mid = lo + (hi - lo) // 2
        select(keys, lo, hi, mid, dim)

        left = self._build_node(keys, lo, mid, depth + 1)
        right = self._build_node(keys, mid + 1, hi, depth + 1)
        return KDNode(keys[mid], dim, left, right)


def build_index(
    keys: Sequence[IndexKey],
) -> Tuple[Optional[SpatialIndex], BuilderStats]:
    """
    Convenience function to build the spatial index for a set of keys.

    Args:
        keys: Index keys, possibly empty

    Returns:
        Tuple of (index, BuilderStats) where index is None for no keys,
        the key itself for exactly one key, and a KDTree otherwise.
    """
    if not keys:
        return None, BuilderStats()
    if len(keys) == 1:
        return keys[0], BuilderStats()

    builder = KDTreeBuilder()
    tree = builder.build(keys)
    return tree, builder.stats
