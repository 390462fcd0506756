"""Tests for k-d tree data structures and nearest-neighbour search."""

import random

import pytest
from geodecode.builder import KDTreeBuilder
from geodecode.kdtree import KDNode, KDTree, DIM_LAT, DIM_LON
from geodecode.models import IndexKey, squared_distance


def make_keys(coords):
    return [IndexKey(c, i) for i, c in enumerate(coords)]


def brute_force(keys, query):
    """Smallest squared distance from query to any key."""
    return min(squared_distance(k.coord, query) for k in keys)


class TestKDNode:
    """Tests for KDNode class."""

    def test_leaf(self):
        """Test leaf node creation."""
        node = KDNode(IndexKey((1.0, 2.0), 0), DIM_LAT)
        assert node.is_leaf()
        assert node.node_count() == 1
        assert node.max_depth() == 0

    def test_counts(self):
        """Test node counts and depth with one child missing."""
        left = KDNode(IndexKey((-1.0, 0.0), 1), DIM_LON)
        root = KDNode(IndexKey((0.0, 0.0), 0), DIM_LAT, left=left)
        assert not root.is_leaf()
        assert root.node_count() == 2
        assert root.max_depth() == 1

    def test_iter_keys_preorder(self):
        """Test that keys are yielded root, left subtree, right subtree."""
        a = IndexKey((0.0, 0.0), 0)
        b = IndexKey((-1.0, 0.0), 1)
        c = IndexKey((1.0, 0.0), 2)
        root = KDNode(a, DIM_LAT, KDNode(b, DIM_LON), KDNode(c, DIM_LON))
        assert list(root.iter_keys()) == [a, b, c]


class TestNearest:
    """Tests for nearest-neighbour search."""

    def test_example_cities(self):
        """Test the nearest of three points on the diagonal."""
        keys = make_keys([(0.0, 0.0), (10.0, 10.0), (-10.0, -10.0)])
        tree = KDTreeBuilder().build(keys)

        key, dist = tree.nearest(1.0, 1.0)
        assert key.index == 0
        assert dist == 2.0

    def test_tie_keeps_first_visited(self):
        """Test that an equally distant later candidate does not replace the best."""
        root_key = IndexKey((0.0, 0.0), 0)
        left_key = IndexKey((-1.0, 5.0), 1)
        right_key = IndexKey((1.0, 5.0), 2)
        root = KDNode(
            root_key,
            DIM_LAT,
            left=KDNode(left_key, DIM_LON),
            right=KDNode(right_key, DIM_LON),
        )
        tree = KDTree(root, 3)

        # (0, 5) is on the root's plane, so the left side is searched first
        key, dist = tree.nearest(0.0, 5.0)
        assert key == left_key
        assert dist == 1.0

    def test_far_side_searched_when_plane_is_closer(self):
        """Test that pruning does not skip a closer point across the plane."""
        root = KDNode(
            IndexKey((0.0, 0.0), 0),
            DIM_LAT,
            left=KDNode(IndexKey((-0.5, 50.0), 1), DIM_LON),
            right=KDNode(IndexKey((0.1, 10.0), 2), DIM_LON),
        )
        tree = KDTree(root, 3)

        key, _ = tree.nearest(-0.1, 10.0)
        assert key.index == 2

    def test_exact_match_for_every_point(self):
        """Test that every indexed point is found at distance zero."""
        rng = random.Random(7)
        coords = [(rng.uniform(-90, 90), rng.uniform(-180, 180)) for _ in range(300)]
        keys = make_keys(coords)
        tree = KDTreeBuilder().build(keys)

        for lat, lon in coords:
            _, dist = tree.nearest(lat, lon)
            assert dist == 0.0

    @pytest.mark.parametrize("seed", [1, 42, 12345])
    def test_matches_brute_force(self, seed):
        """Test optimality against a linear scan."""
        rng = random.Random(seed)
        coords = [(rng.uniform(-90, 90), rng.uniform(-180, 180)) for _ in range(500)]
        keys = make_keys(coords)
        tree = KDTreeBuilder().build(keys)

        for _ in range(200):
            query = (rng.uniform(-90, 90), rng.uniform(-180, 180))
            key, dist = tree.nearest(*query)
            assert dist == squared_distance(key.coord, query)
            assert dist == brute_force(keys, query)

    def test_clustered_points(self):
        """Test optimality with many duplicate and near-duplicate points."""
        rng = random.Random(3)
        coords = []
        for _ in range(400):
            lat = rng.choice([0.0, 0.5, 1.0])
            lon = rng.choice([10.0, 10.5])
            coords.append((lat, lon))
        keys = make_keys(coords)
        tree = KDTreeBuilder().build(keys)

        for _ in range(100):
            query = (rng.uniform(-2, 3), rng.uniform(8, 12))
            _, dist = tree.nearest(*query)
            assert dist == brute_force(keys, query)

    def test_deterministic(self):
        """Test that repeated queries return the same key."""
        rng = random.Random(99)
        coords = [(float(rng.randint(-5, 5)), float(rng.randint(-5, 5))) for _ in range(200)]
        tree = KDTreeBuilder().build(make_keys(coords))

        first, _ = tree.nearest(0.5, 0.5)
        for _ in range(20):
            key, _ = tree.nearest(0.5, 0.5)
            assert key == first


class TestKDTree:
    """Tests for KDTree class."""

    def test_size_and_iteration(self):
        keys = make_keys([(float(i), float(-i)) for i in range(10)])
        tree = KDTreeBuilder().build(keys)

        assert len(tree) == 10
        assert tree.node_count == 10
        assert sorted(k.index for k in tree) == list(range(10))

    def test_depth_balanced(self):
        """Test that median splits give a logarithmic depth."""
        keys = make_keys([(float(i % 90), float(i % 180)) for i in range(1000)])
        tree = KDTreeBuilder().build(keys)

        # floor(log2(1000)) == 9
        assert tree.depth == 9
