# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)

"""
Unit tests for run_layout and LayoutEngine - progressive, superseding runs.
"""

import random
import threading
import unittest

from podbubble.config import LayoutConfig
from podbubble.graph import GraphStore, PositionsUpdated
from podbubble.layout import LayoutEngine, run_layout


def populated_store(config, seed=11):
    store = GraphStore(config, random.Random(seed))
    for group, members in (("TGG", ["Ben", "Adam"]), ("FF", ["Ben", "Adam", "Rod"])):
        g = store.add_group_node(group)
        for label in members:
            store.add_edge(g, store.add_or_get_member_node(label))
    return store


class TestRunLayout(unittest.TestCase):
    """Tests for the run_layout generator."""

    def test_one_frame_per_iteration(self):
        config = LayoutConfig(iterations=7, frame_pause=0)
        store = populated_store(config)
        frames = list(run_layout(store, config))
        self.assertEqual([f.iteration for f in frames], list(range(7)))
        self.assertEqual(set(frames[-1].positions), set(store.snapshot().nodes))

    def test_frames_written_back_and_published(self):
        config = LayoutConfig(iterations=3, frame_pause=0)
        store = populated_store(config)
        published = []
        store.subscribe(lambda e: published.append(e) if isinstance(e, PositionsUpdated) else None)

        frames = list(run_layout(store, config))

        self.assertEqual(len(published), 3)
        self.assertEqual(store.snapshot().positions(), frames[-1].positions)

    def test_bounds_hold_after_every_frame(self):
        config = LayoutConfig(iterations=30, frame_pause=0)
        store = populated_store(config)
        bounds = config.bounds
        for _ in run_layout(store, config):
            for node in store.snapshot().nodes.values():
                self.assertTrue(bounds.contains(*node.position))

    def test_pinned_node_never_moves(self):
        config = LayoutConfig(iterations=20, frame_pause=0)
        store = populated_store(config)
        ben = store.add_or_get_member_node("Ben")
        store.set_position(ben, (60.0, 110.0), mark_pinned=True)

        for frame in run_layout(store, config):
            self.assertNotIn(ben, frame.positions)
            self.assertEqual(tuple(store.get_node(ben).position), (60.0, 110.0))

    def test_drag_mid_run_wins(self):
        """A node pinned between frames is left alone from then on."""
        config = LayoutConfig(iterations=10, frame_pause=0)
        store = populated_store(config)
        rod = store.add_or_get_member_node("Rod")

        run = run_layout(store, config)
        next(run)
        store.set_position(rod, (300.0, 500.0), mark_pinned=True)
        for frame in run:
            self.assertNotIn(rod, frame.positions)
        self.assertEqual(tuple(store.get_node(rod).position), (300.0, 500.0))

    def test_stop_event_ends_run(self):
        config = LayoutConfig(iterations=50, frame_pause=0)
        store = populated_store(config)
        stop = threading.Event()

        frames = []
        for frame in run_layout(store, config, stop):
            frames.append(frame)
            if len(frames) == 4:
                stop.set()
        self.assertEqual(len(frames), 4)

    def test_restart_on_mutation(self):
        """Adding a node mid-run restarts the count and includes the node."""
        config = LayoutConfig(iterations=5, frame_pause=0)
        store = populated_store(config)

        run = run_layout(store, config)
        next(run)
        next(run)
        new_id = store.add_or_get_member_node("Merlin")
        rest = list(run)

        self.assertEqual(len(rest), 5)
        self.assertEqual(rest[0].iteration, 0)
        self.assertIn(new_id, rest[0].positions)

    def test_no_restart_when_disabled(self):
        config = LayoutConfig(iterations=5, frame_pause=0, restart_on_mutation=False)
        store = populated_store(config)

        run = run_layout(store, config)
        next(run)
        next(run)
        store.add_or_get_member_node("Merlin")
        self.assertEqual(len(list(run)), 3)


class TestLayoutEngine(unittest.TestCase):
    """Tests for the background engine."""

    def test_run_completes_and_reports_status(self):
        config = LayoutConfig(iterations=10, frame_pause=0)
        store = populated_store(config)
        engine = LayoutEngine(store)
        statuses = []
        engine.subscribe_status(statuses.append)

        engine.request_layout()
        self.assertTrue(engine.wait(timeout=10))

        self.assertFalse(engine.is_running)
        self.assertEqual(statuses, [True, False])
        run = engine.history[-1]
        self.assertTrue(run.completed)
        self.assertEqual(run.frames, 10)
        self.assertIsNone(run.error)

    def test_new_request_supersedes_running_one(self):
        config = LayoutConfig(iterations=60, frame_pause=0.01)
        store = populated_store(config)
        engine = LayoutEngine(store)
        statuses = []
        engine.subscribe_status(statuses.append)

        first = engine.request_layout()
        second = engine.request_layout()
        self.assertEqual(second, first + 1)
        self.assertTrue(engine.wait(timeout=20))

        old, new = engine.history[0], engine.history[1]
        self.assertFalse(old.completed)
        self.assertLess(old.frames, 60)
        self.assertTrue(new.completed)
        self.assertEqual(new.frames, 60)
        # busy once, idle once: overlapping runs do not flicker the flag
        self.assertEqual(statuses, [True, False])

    def test_stop(self):
        config = LayoutConfig(iterations=1000, frame_pause=0.01)
        store = populated_store(config)
        engine = LayoutEngine(store)

        engine.request_layout()
        self.assertTrue(engine.stop(timeout=10))
        self.assertFalse(engine.is_running)
        self.assertFalse(engine.history[-1].completed)

    def test_wait_when_idle(self):
        engine = LayoutEngine(populated_store(LayoutConfig(frame_pause=0)))
        self.assertTrue(engine.wait(timeout=1))
        self.assertFalse(engine.is_running)


if __name__ == '__main__':
    unittest.main()
