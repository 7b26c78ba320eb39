# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)

"""
Unit tests for force_directed.py - the spring-electrical layout step.
"""

import random
import unittest

import numpy as np

from podbubble.config import LayoutConfig
from podbubble.graph import GraphStore, GraphSnapshot, Node, Edge, NodeCategory, Point
from podbubble.layout import force_step, force_directed, snapshot_arrays


def node(node_id, x, y, pinned=False):
    return Node(
        id=node_id,
        label=node_id,
        category=NodeCategory.MEMBER,
        position=Point(float(x), float(y)),
        pinned=pinned,
    )


def snapshot(nodes, edges=()):
    return GraphSnapshot(
        nodes={n.id: n for n in nodes},
        edges=tuple(Edge(id=f"e{i}", from_id=a, to_id=b) for i, (a, b) in enumerate(edges)),
    )


def separation(positions, a, b):
    return float(np.hypot(positions[a][0] - positions[b][0], positions[a][1] - positions[b][1]))


class TestRepulsion(unittest.TestCase):
    """Short-range repulsion between unconnected nodes."""

    def setUp(self):
        self.config = LayoutConfig(frame_pause=0)

    def test_close_pair_separates(self):
        """Two nodes closer than min_distance move strictly apart."""
        snap = snapshot([node("a", 180, 300), node("b", 220, 300)])
        new = force_directed(snap, self.config)
        self.assertGreater(separation(new, "a", "b"), 40.0)
        # 4000 / 40^2 = 2.5 px each way
        self.assertAlmostEqual(new["a"].x, 177.5)
        self.assertAlmostEqual(new["b"].x, 222.5)
        self.assertAlmostEqual(new["a"].y, 300.0)

    def test_far_pair_does_not_interact(self):
        """Nodes beyond min_distance exert no force."""
        snap = snapshot([node("a", 100, 300), node("b", 200, 300)])
        new = force_directed(snap, self.config)
        self.assertEqual(new["a"], Point(100.0, 300.0))
        self.assertEqual(new["b"], Point(200.0, 300.0))

    def test_coincident_nodes_stay_finite(self):
        """Distance floor keeps coincident nodes from producing inf/nan."""
        snap = snapshot([node("a", 200, 300), node("b", 200, 300)])
        new = force_directed(snap, self.config)
        for point in new.values():
            self.assertTrue(np.isfinite(point.x) and np.isfinite(point.y))


class TestAttraction(unittest.TestCase):
    """Hookean attraction along edges."""

    def setUp(self):
        self.config = LayoutConfig(frame_pause=0)

    def test_connected_pair_pulls_together(self):
        """0.05 * 200 = 10 px toward each other."""
        snap = snapshot([node("a", 100, 300), node("b", 300, 300)], [("a", "b")])
        new = force_directed(snap, self.config)
        self.assertAlmostEqual(new["a"].x, 110.0)
        self.assertAlmostEqual(new["b"].x, 290.0)

    def test_separation_decreases_until_repulsion_range(self):
        """Separation shrinks every iteration while above min_distance."""
        nodes = [node("a", 100, 300), node("b", 300, 300)]
        store_positions = {n.id: n.position for n in nodes}
        previous = separation(store_positions, "a", "b")

        while previous > self.config.min_distance:
            snap = snapshot(
                [node(k, *v) for k, v in store_positions.items()], [("a", "b")]
            )
            store_positions = force_directed(snap, self.config)
            current = separation(store_positions, "a", "b")
            self.assertLess(current, previous)
            previous = current

    def test_pair_settles_at_force_balance(self):
        """Attraction 0.05*d balances repulsion 4000/d^2 at d = 80000^(1/3)."""
        positions = np.array([[100.0, 300.0], [300.0, 300.0]])
        edges = np.array([[0, 1]])
        pinned = np.zeros(2, dtype=bool)
        for _ in range(self.config.iterations):
            positions = force_step(positions, edges, pinned, self.config)
        d = float(np.linalg.norm(positions[0] - positions[1]))
        self.assertAlmostEqual(d, 80000 ** (1 / 3), delta=0.5)

    def test_parallel_edges_each_pull(self):
        single = snapshot([node("a", 100, 300), node("b", 300, 300)], [("a", "b")])
        double = snapshot([node("a", 100, 300), node("b", 300, 300)], [("a", "b"), ("b", "a")])
        self.assertAlmostEqual(force_directed(single, self.config)["a"].x, 110.0)
        self.assertAlmostEqual(force_directed(double, self.config)["a"].x, 120.0)


class TestInvariants(unittest.TestCase):
    """Bounds, pinning and order independence."""

    def setUp(self):
        self.config = LayoutConfig(frame_pause=0)
        rng = random.Random(3)
        self.nodes = [
            node(f"n{i}", rng.uniform(-200, 600), rng.uniform(-200, 900))
            for i in range(30)
        ]
        self.edges = [(f"n{i}", f"n{(i * 7 + 3) % 30}") for i in range(30)]

    def test_positions_clamped_into_bounds(self):
        b = self.config.bounds
        snap = snapshot(self.nodes, self.edges)
        for _ in range(25):
            new = force_directed(snap, self.config)
            for point in new.values():
                self.assertTrue(b.min_x <= point.x <= b.max_x)
                self.assertTrue(b.min_y <= point.y <= b.max_y)
            snap = snapshot([node(k, *v) for k, v in new.items()], self.edges)

    def test_default_bounds(self):
        b = self.config.bounds
        self.assertEqual((b.min_x, b.max_x, b.min_y, b.max_y), (50.0, 350.0, 100.0, 650.0))

    def test_pinned_node_untouched(self):
        """Pinned nodes keep their position, even outside bounds."""
        nodes = [node("pin", 10, 10, pinned=True), node("a", 20, 15), node("b", 300, 300)]
        snap = snapshot(nodes, [("pin", "b"), ("a", "pin")])

        ids, positions, edge_index, pinned = snapshot_arrays(snap)
        for _ in range(10):
            positions = force_step(positions, edge_index, pinned, self.config)
            self.assertEqual(tuple(positions[ids.index("pin")]), (10.0, 10.0))

        # pinned nodes are left out of the id -> position result
        self.assertNotIn("pin", force_directed(snap, self.config))

    def test_pinned_node_still_repels(self):
        nodes = [node("pin", 200, 300, pinned=True), node("a", 230, 300)]
        new = force_directed(snapshot(nodes), self.config)
        self.assertGreater(new["a"].x, 230.0)

    def test_order_independent(self):
        """Reversing node order yields the same positions."""
        forward = force_directed(snapshot(self.nodes, self.edges), self.config)
        backward = force_directed(snapshot(list(reversed(self.nodes)), self.edges), self.config)
        for node_id, point in forward.items():
            self.assertAlmostEqual(point.x, backward[node_id].x)
            self.assertAlmostEqual(point.y, backward[node_id].y)

    def test_input_array_not_modified(self):
        ids, positions, edge_index, pinned = snapshot_arrays(snapshot(self.nodes, self.edges))
        before = positions.copy()
        force_step(positions, edge_index, pinned, self.config)
        np.testing.assert_array_equal(positions, before)

    def test_empty_graph(self):
        self.assertEqual(force_directed(GraphSnapshot(), self.config), {})
        empty = np.zeros((0, 2))
        result = force_step(empty, np.zeros((0, 2), dtype=np.intp), np.zeros(0, dtype=bool), self.config)
        self.assertEqual(result.shape, (0, 2))

    def test_store_snapshot_round_trip(self):
        """force_directed accepts snapshots straight from a store."""
        store = GraphStore(self.config, random.Random(5))
        g = store.add_group_node("TGG")
        for label in ("Ben", "Adam"):
            store.add_edge(g, store.add_or_get_member_node(label))
        new = force_directed(store.snapshot(), self.config)
        self.assertEqual(set(new), set(store.snapshot().nodes))


if __name__ == '__main__':
    unittest.main()
