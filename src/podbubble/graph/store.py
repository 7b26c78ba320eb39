# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Thread-safe graph store shared by ingestion, layout and user input.

"""
Graph store for the podbubble core.

The store is the single shared mutable resource. Three actors write to
it: the ingestion driver (new nodes and edges), the user (drag =
position override + pin) and the layout engine (one bulk write per
iteration). Every mutation runs under one re-entrant lock, so a drag
and a layout frame for the same node never interleave, and the pin
flag is set in the same critical section as the position override.

Observers subscribe to StoreEvents; events are emitted while the lock
is held so they arrive in mutation order. Callbacks should hand the
event off (e.g. to a queue) rather than do real work.

Usage:
    store = GraphStore(rng=random.Random(7))
    pod = store.add_group_node('TGG')
    ben = store.add_or_get_member_node('Ben')
    store.add_edge(pod, ben)

    store.set_position(ben, (120.0, 300.0), mark_pinned=True)
    snap = store.snapshot()
"""

import math
import random
import threading
import uuid
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import logging

from ..config import LayoutConfig
from ..errors import InvalidReference
from .models import (
    Node,
    Edge,
    NodeCategory,
    Point,
    GraphSnapshot,
    NodeAdded,
    EdgeAdded,
    NodeMoved,
    PositionsUpdated,
    StoreEvent,
)

logger = logging.getLogger(__name__)

Subscriber = Callable[[StoreEvent], None]


class GraphStore:
    """
    Process-wide node/edge store with consistent ids.

    Thread-safe: all public methods may be called from any thread.
    """

    def __init__(
        self,
        config: Optional[LayoutConfig] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Args:
            config: Supplies the spawn box for new nodes.
            rng: Random source for initial placement and ids. Pass a
                 seeded random.Random for reproducible graphs.
        """
        self.config = config or LayoutConfig()
        self._rng = rng or random.Random()
        self._lock = threading.RLock()
        self._nodes: Dict[str, Node] = {}
        self._edges: List[Edge] = []
        self._members_by_label: Dict[str, str] = {}
        self._generation = 0
        self._subscribers: List[Subscriber] = []

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def subscribe(
        self,
        callback: Subscriber,
        replay: bool = False
    ) -> Callable[[], None]:
        """
        Register an event callback. Returns an unsubscribe function.

        With replay, NodeAdded/EdgeAdded events for everything already in
        the store are delivered first, atomically with the registration,
        so the subscriber neither misses nor duplicates a mutation.
        """
        with self._lock:
            if replay:
                for node in self._nodes.values():
                    callback(NodeAdded(node))
                for edge in self._edges:
                    callback(EdgeAdded(edge))
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _emit(self, event: StoreEvent):
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception(f"Store subscriber {callback!r} failed on {type(event).__name__}")

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _new_id(self) -> str:
        return str(uuid.UUID(int=self._rng.getrandbits(128), version=4))

    def _spawn_position(self) -> Point:
        spawn_x, spawn_y = self.config.spawn_region
        return Point(self._rng.uniform(*spawn_x), self._rng.uniform(*spawn_y))

    def _create_node(self, label: str, category: NodeCategory) -> Node:
        node = Node(
            id=self._new_id(),
            label=label,
            category=category,
            position=self._spawn_position(),
        )
        self._nodes[node.id] = node
        self._generation += 1
        # id and initial position go out together
        self._emit(NodeAdded(node))
        return node

    def add_group_node(self, label: str) -> str:
        """Create a Group node at a random spawn position. Returns its id."""
        with self._lock:
            node = self._create_node(label, NodeCategory.GROUP)
            logger.debug(f"Added group node {label!r} ({node.id})")
            return node.id

    def add_or_get_member_node(self, label: str) -> str:
        """
        Return the id of the Member node labelled `label`, creating it
        if needed. Labels match exactly (case-sensitive).
        """
        with self._lock:
            existing = self._members_by_label.get(label)
            if existing is not None:
                return existing
            node = self._create_node(label, NodeCategory.MEMBER)
            self._members_by_label[label] = node.id
            logger.debug(f"Added member node {label!r} ({node.id})")
            return node.id

    def add_edge(self, from_id: str, to_id: str) -> str:
        """
        Connect two existing nodes. Returns the edge id.

        Raises:
            InvalidReference: if either endpoint is not in the store.
        """
        with self._lock:
            for node_id in (from_id, to_id):
                if node_id not in self._nodes:
                    raise InvalidReference(node_id, f"edge endpoint not in store: {node_id!r}")
            edge = Edge(id=self._new_id(), from_id=from_id, to_id=to_id)
            self._edges.append(edge)
            self._generation += 1
            self._emit(EdgeAdded(edge))
            return edge.id

    # ------------------------------------------------------------------
    # External position control
    # ------------------------------------------------------------------

    def set_position(
        self,
        node_id: str,
        point: Sequence[float],
        mark_pinned: bool = False
    ) -> Node:
        """
        Overwrite a node's position; with mark_pinned the node is also
        excluded from force updates until unpinned. Position and pin
        are applied atomically with respect to the next layout read.

        Raises:
            InvalidReference: if node_id is not in the store.
        """
        x, y = float(point[0]), float(point[1])
        if not (math.isfinite(x) and math.isfinite(y)):
            raise ValueError(f"position must be finite, got ({x}, {y})")

        with self._lock:
            node = self._nodes.get(node_id)
            if node is None:
                raise InvalidReference(node_id)
            node = node.moved_to(Point(x, y), pinned=True if mark_pinned else None)
            self._nodes[node_id] = node
            self._emit(NodeMoved(node))
            return node

    def set_pinned(self, node_id: str, pinned: bool) -> Node:
        """Pin or release a node without moving it."""
        with self._lock:
            node = self._nodes.get(node_id)
            if node is None:
                raise InvalidReference(node_id)
            if node.pinned != pinned:
                node = node.moved_to(node.position, pinned=pinned)
                self._nodes[node_id] = node
                self._emit(NodeMoved(node))
            return node

    # ------------------------------------------------------------------
    # Layout write-back
    # ------------------------------------------------------------------

    def apply_layout(
        self,
        positions: Dict[str, Tuple[float, float]],
        iteration: int = 0,
        generation: Optional[int] = None
    ) -> Dict[str, Point]:
        """
        Write one layout iteration back in a single critical section.

        Pinned nodes (pinned at any point before this call took the
        lock) and ids no longer in the store are left untouched.

        Returns:
            The positions actually applied.
        """
        applied: Dict[str, Point] = {}
        with self._lock:
            for node_id, (x, y) in positions.items():
                node = self._nodes.get(node_id)
                if node is None or node.pinned:
                    continue
                if not (math.isfinite(x) and math.isfinite(y)):
                    logger.warning(f"Dropping non-finite layout position for {node_id}")
                    continue
                point = Point(float(x), float(y))
                self._nodes[node_id] = node.moved_to(point)
                applied[node_id] = point

            if applied:
                self._emit(PositionsUpdated(
                    positions=applied,
                    iteration=iteration,
                    generation=self._generation if generation is None else generation,
                ))
        return applied

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def generation(self) -> int:
        """Incremented on every structural change (node or edge added)."""
        with self._lock:
            return self._generation

    def snapshot(self) -> GraphSnapshot:
        """Consistent copy of nodes and edges for one layout iteration."""
        with self._lock:
            return GraphSnapshot(
                nodes=dict(self._nodes),
                edges=tuple(self._edges),
                generation=self._generation,
            )

    def get_node(self, node_id: str) -> Node:
        with self._lock:
            node = self._nodes.get(node_id)
            if node is None:
                raise InvalidReference(node_id)
            return node

    def find_node(self, label: str, category: NodeCategory) -> Optional[Node]:
        """First node with this exact label and category, if any."""
        with self._lock:
            if category is NodeCategory.MEMBER:
                node_id = self._members_by_label.get(label)
                return self._nodes.get(node_id) if node_id else None
            for node in self._nodes.values():
                if node.label == label and node.category is category:
                    return node
            return None

    def edge_count(self) -> int:
        with self._lock:
            return len(self._edges)

    def __len__(self) -> int:
        with self._lock:
            return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        with self._lock:
            return node_id in self._nodes
