# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Force-directed layout step with NumPy acceleration.

"""
Force-directed layout using a spring-electrical model.

Each iteration is a first-order relaxation: every free node moves by
the sum of the forces acting on it (no velocity, no damping), then is
clamped into the configured bounds.

- Repulsion is short-range: only pairs closer than min_distance push
  each other apart, with strength repulsion / d^2.
- Attraction is Hookean along edges: attraction * d toward the
  neighbour, unbounded with distance.
- Distances are floored at 1 so coincident nodes cannot blow up.

All forces of one iteration are computed from a single frozen copy of
the previous positions, so the result does not depend on node order.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Optional, Iterator
import logging
import threading

import numpy as np

from ..config import LayoutConfig
from ..graph.models import GraphSnapshot, Point

logger = logging.getLogger(__name__)


@dataclass
class LayoutFrame:
    """Positions written by one layout iteration."""
    iteration: int
    generation: int
    positions: Dict[str, Point] = field(default_factory=dict)


def snapshot_arrays(
    snapshot: GraphSnapshot
) -> Tuple[List[str], np.ndarray, np.ndarray, np.ndarray]:
    """
    Convert a snapshot into arrays for force_step.

    Returns:
        node_ids: Node ids in array order.
        positions: (n, 2) float array.
        edge_index: (m, 2) int array of endpoint indices.
        pinned: (n,) bool array.
    """
    node_ids = list(snapshot.nodes.keys())
    id_to_idx = {nid: i for i, nid in enumerate(node_ids)}
    n = len(node_ids)

    positions = np.zeros((n, 2))
    pinned = np.zeros(n, dtype=bool)
    for i, nid in enumerate(node_ids):
        node = snapshot.nodes[nid]
        positions[i, 0] = node.position.x
        positions[i, 1] = node.position.y
        pinned[i] = node.pinned

    pairs = [
        (id_to_idx[e.from_id], id_to_idx[e.to_id])
        for e in snapshot.edges
        if e.from_id in id_to_idx and e.to_id in id_to_idx
    ]
    edge_index = np.array(pairs, dtype=np.intp).reshape(-1, 2)

    return node_ids, positions, edge_index, pinned


def force_step(
    positions: np.ndarray,
    edge_index: np.ndarray,
    pinned: np.ndarray,
    config: LayoutConfig
) -> np.ndarray:
    """
    One vectorized layout iteration.

    Args:
        positions: (n, 2) positions from the previous iteration. Not
                   modified.
        edge_index: (m, 2) endpoint indices; parallel edges each pull.
        pinned: (n,) mask of nodes to leave exactly where they are.
        config: Force strengths, cutoff radius and bounds.

    Returns:
        New (n, 2) position array.
    """
    n = positions.shape[0]
    if n == 0:
        return positions.copy()

    forces = np.zeros((n, 2))

    # Repulsion: diff[i, j] = p[i] - p[j], pushes i away from j
    diff = positions[:, np.newaxis, :] - positions[np.newaxis, :, :]  # (n, n, 2)
    dist = np.sqrt(np.sum(diff ** 2, axis=2))  # (n, n)
    dist = np.maximum(dist, 1.0)

    close = dist < config.min_distance
    np.fill_diagonal(close, False)
    repulsion = np.where(close, config.repulsion_strength / (dist ** 2), 0.0)

    direction = diff / dist[:, :, np.newaxis]
    forces += np.sum(direction * repulsion[:, :, np.newaxis], axis=1)

    # Attraction along edges, applied to both endpoints
    if edge_index.size:
        src = edge_index[:, 0]
        dst = edge_index[:, 1]
        delta = positions[dst] - positions[src]  # (m, 2), src -> dst
        edge_dist = np.maximum(np.sqrt(np.sum(delta ** 2, axis=1)), 1.0)
        pull = (config.attraction_strength * edge_dist)[:, np.newaxis] * (
            delta / edge_dist[:, np.newaxis]
        )
        np.add.at(forces, src, pull)
        np.add.at(forces, dst, -pull)

    new_positions = positions + forces

    bounds = config.bounds
    new_positions[:, 0] = np.clip(new_positions[:, 0], bounds.min_x, bounds.max_x)
    new_positions[:, 1] = np.clip(new_positions[:, 1], bounds.min_y, bounds.max_y)

    # Pinned nodes are authoritative, not even clamped
    new_positions[pinned] = positions[pinned]

    return new_positions


def force_directed(
    snapshot: GraphSnapshot,
    config: Optional[LayoutConfig] = None
) -> Dict[str, Point]:
    """
    Compute one iteration of layout for a graph snapshot.

    Returns:
        Dictionary mapping free (non-pinned) node ids to new positions.
    """
    config = config or LayoutConfig()
    if not snapshot.nodes:
        return {}

    node_ids, positions, edge_index, pinned = snapshot_arrays(snapshot)
    new_positions = force_step(positions, edge_index, pinned, config)

    return {
        node_ids[i]: Point(float(new_positions[i, 0]), float(new_positions[i, 1]))
        for i in range(len(node_ids))
        if not pinned[i]
    }


def run_layout(
    store,
    config: Optional[LayoutConfig] = None,
    stop_event: Optional[threading.Event] = None
) -> Iterator[LayoutFrame]:
    """
    Run the simulation against a live GraphStore, one frame at a time.

    Every iteration takes a fresh snapshot, computes new positions,
    writes them back with store.apply_layout (which publishes them) and
    yields the frame. Between iterations the generator sleeps for
    config.frame_pause; setting stop_event wakes it and ends the run.

    When config.restart_on_mutation is set and the store's generation
    has moved since the last iteration (a node or edge was added), the
    iteration count starts over against the new graph.

    Args:
        store: GraphStore to read and write.
        config: Layout parameters (default: the store's config).
        stop_event: Ends the run before its next write once set.

    Yields:
        LayoutFrame per completed iteration.
    """
    config = config or store.config
    stop_event = stop_event or threading.Event()

    generation = store.generation
    iteration = 0
    total = 0

    while iteration < config.iterations:
        if stop_event.is_set():
            logger.debug(f"Layout stopped after {total} frames")
            return

        snapshot = store.snapshot()
        if config.restart_on_mutation and snapshot.generation != generation:
            logger.debug(
                f"Graph changed (generation {generation} -> {snapshot.generation}), "
                f"restarting iteration count at frame {total}"
            )
            generation = snapshot.generation
            iteration = 0

        positions = force_directed(snapshot, config)

        if stop_event.is_set():
            logger.debug(f"Layout stopped after {total} frames")
            return

        applied = store.apply_layout(positions, iteration, snapshot.generation)
        yield LayoutFrame(iteration=iteration, generation=snapshot.generation, positions=applied)

        iteration += 1
        total += 1

        if config.frame_pause > 0 and iteration < config.iterations:
            if stop_event.wait(config.frame_pause):
                logger.debug(f"Layout stopped after {total} frames")
                return
