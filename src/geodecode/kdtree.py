"""
K-d tree data structures and nearest-neighbour search.

This module defines the nodes of the 2-d partition tree built over the
location dataset, and the branch-and-bound search that finds the key
closest to a query coordinate under planar squared distance.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from .models import IndexKey, squared_distance


# Split dimensions
DIM_LAT = 0
DIM_LON = 1
DIMENSIONS = 2


@dataclass(frozen=True)
class KDNode:
    """
    A node of the k-d tree.

    Every key in `left` has a value on `dim` that is <= this node's,
    every key in `right` has a value >= it. Equal values may sit on
    either side.
    """
    key: IndexKey
    dim: int
    left: Optional[KDNode] = None
    right: Optional[KDNode] = None

    def is_leaf(self) -> bool:
        """Return True if this node has no children."""
        return self.left is None and self.right is None

    def node_count(self) -> int:
        """Return total number of nodes in this subtree."""
        count = 1
        for child in (self.left, self.right):
            if child is not None:
                count += child.node_count()
        return count

    def max_depth(self) -> int:
        """Return maximum depth of this subtree (a leaf has depth 0)."""
        max_child_depth = -1
        for child in (self.left, self.right):
            if child is not None:
                max_child_depth = max(max_child_depth, child.max_depth())
        return 1 + max_child_depth

    def iter_keys(self) -> Iterator[IndexKey]:
        """Yield the keys of this subtree in pre-order."""
        yield self.key
        for child in (self.left, self.right):
            if child is not None:
                yield from child.iter_keys()

    def nearest(
        self,
        query: Tuple[float, float],
        best: Optional[Tuple[IndexKey, float]],
    ) -> Tuple[IndexKey, float]:
        """
        Search this subtree for the key closest to `query`.

        Args:
            query: (lat, lon) of the query point
            best: Best (key, squared distance) found so far, or None

        Returns:
            The best (key, squared distance) after visiting this subtree.
            A candidate replaces the current best only when strictly
            closer, so on ties the first key met in traversal order wins.
        """
        dist = squared_distance(self.key.coord, query)
        if best is None or dist < best[1]:
            best = (self.key, dist)

        diff = query[self.dim] - self.key.coord[self.dim]
        if diff <= 0:
            near, far = self.left, self.right
        else:
            near, far = self.right, self.left

        if near is not None:
            best = near.nearest(query, best)

        # Only cross the splitting plane if it is closer than the best so far
        if far is not None and diff * diff < best[1]:
            best = far.nearest(query, best)

        return best


class KDTree:
    """
    An immutable 2-d tree over index keys.

    Built once by `KDTreeBuilder`; never modified afterwards, so it can
    be searched from any number of threads without locking.
    """

    def __init__(self, root: KDNode, size: int):
        """
        Initialize a k-d tree.

        Args:
            root: The root node of the tree
            size: Number of keys stored in the tree
        """
        self.root = root
        self.size = size

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[IndexKey]:
        return self.root.iter_keys()

    def nearest(self, lat: float, lon: float) -> Tuple[IndexKey, float]:
        """
        Find the key closest to (lat, lon).

        Args:
            lat: Query latitude in degrees
            lon: Query longitude in degrees

        Returns:
            Tuple of (nearest key, squared distance)
        """
        return self.root.nearest((lat, lon), None)

    @property
    def node_count(self) -> int:
        """Total number of nodes in the tree."""
        return self.root.node_count()

    @property
    def depth(self) -> int:
        """Maximum depth of the tree."""
        return self.root.max_depth()
