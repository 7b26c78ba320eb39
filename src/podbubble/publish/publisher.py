# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Throttled bridge from the graph store to renderers.

"""
Update publisher.

Store events and layout status changes go onto a queue. A single
consumer (the publisher thread, or whoever calls pump()) owns the
renderer-facing copy of the graph, applies the messages in order and
hands observers an immutable RenderState, at most once per
min_interval. Position frames that arrive faster than that are
coalesced.

A node enters the render copy only through NodeAdded, which carries its
initial position, so observers never see an id without a position.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple
import logging
import queue
import threading
import time

from ..config import PublisherConfig
from ..graph.models import (
    Node,
    Edge,
    Point,
    NodeAdded,
    EdgeAdded,
    NodeMoved,
    PositionsUpdated,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusChanged:
    """Layout engine went busy or idle."""
    is_processing: bool


_STOP = object()


@dataclass(frozen=True)
class RenderState:
    """What a renderer needs to draw one frame."""
    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()
    is_processing: bool = False
    frame: int = 0

    def node_map(self) -> Dict[str, Node]:
        return {n.id: n for n in self.nodes}

    def edge_segments(self) -> List[Tuple[Point, Point]]:
        """Endpoint positions of every edge, for drawing line segments."""
        by_id = self.node_map()
        return [
            (by_id[e.from_id].position, by_id[e.to_id].position)
            for e in self.edges
            if e.from_id in by_id and e.to_id in by_id
        ]


Observer = Callable[[RenderState], None]


class UpdatePublisher:
    """
    Single-consumer channel between the core and the rendering layer.

    Usage:
        publisher = UpdatePublisher(store)
        publisher.subscribe(lambda state: draw(state.nodes, state.edges))
        publisher.start()          # background consumer
        ...
        publisher.stop()

    Without start(), call pump() to deliver pending updates on the
    calling thread.
    """

    def __init__(self, store=None, config: Optional[PublisherConfig] = None):
        self.config = config or PublisherConfig()
        self._queue: "queue.Queue" = queue.Queue()
        self._consumer_lock = threading.RLock()
        self._observers: List[Observer] = []

        # Render copy, touched only by the consumer
        self._nodes: Dict[str, Node] = {}
        self._edges: Dict[str, Edge] = {}
        self._is_processing = False
        self._dirty = False
        self._frame = 0
        self._last_notify = float("-inf")

        self._thread: Optional[threading.Thread] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        if store is not None:
            self.attach(store)

    # ------------------------------------------------------------------
    # Producers (any thread)
    # ------------------------------------------------------------------

    def attach(self, store):
        """Mirror a GraphStore, starting with everything already in it."""
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = store.subscribe(self.publish, replay=True)

    def publish(self, message):
        """Enqueue a store event or StatusChanged."""
        self._queue.put(message)

    def publish_status(self, is_processing: bool):
        self._queue.put(StatusChanged(is_processing))

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register a RenderState observer. Returns an unsubscribe function."""
        with self._consumer_lock:
            self._observers.append(observer)

        def unsubscribe():
            with self._consumer_lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    @property
    def state(self) -> RenderState:
        """Current render copy (as of the last applied message)."""
        with self._consumer_lock:
            return self._render_state()

    def _render_state(self) -> RenderState:
        return RenderState(
            nodes=tuple(self._nodes.values()),
            edges=tuple(self._edges.values()),
            is_processing=self._is_processing,
            frame=self._frame,
        )

    # ------------------------------------------------------------------
    # Consumer
    # ------------------------------------------------------------------

    def _apply(self, message):
        if isinstance(message, NodeAdded):
            self._nodes[message.node.id] = message.node
        elif isinstance(message, NodeMoved):
            self._nodes[message.node.id] = message.node
        elif isinstance(message, EdgeAdded):
            self._edges[message.edge.id] = message.edge
        elif isinstance(message, PositionsUpdated):
            for node_id, point in message.positions.items():
                node = self._nodes.get(node_id)
                if node is not None:
                    self._nodes[node_id] = node.moved_to(point)
        elif isinstance(message, StatusChanged):
            self._is_processing = message.is_processing
        else:
            logger.warning(f"Ignoring unknown message {message!r}")
            return
        self._dirty = True

    def _drain(self) -> bool:
        """Apply everything queued. Returns True if a stop was requested."""
        stop = False
        while True:
            try:
                message = self._queue.get_nowait()
            except queue.Empty:
                return stop
            if message is _STOP:
                stop = True
                continue
            self._apply(message)

    def _notify(self):
        state = self._render_state()
        self._frame += 1
        self._dirty = False
        self._last_notify = time.monotonic()
        for observer in list(self._observers):
            try:
                observer(state)
            except Exception:
                logger.exception(f"Render observer {observer!r} failed")

    def pump(self, force: bool = True) -> bool:
        """
        Apply pending messages and notify observers.

        Args:
            force: Notify even if min_interval has not elapsed.

        Returns:
            True if observers were notified.
        """
        with self._consumer_lock:
            self._drain()
            if not self._dirty:
                return False
            if not force and time.monotonic() - self._last_notify < self.config.min_interval:
                return False
            self._notify()
            return True

    def _consume(self):
        while True:
            timeout = None
            if self._dirty:
                timeout = max(0.0, self._last_notify + self.config.min_interval - time.monotonic())
            try:
                message = self._queue.get(timeout=timeout)
            except queue.Empty:
                message = None

            with self._consumer_lock:
                stop = message is _STOP
                if message is not None and not stop:
                    self._apply(message)
                stop = self._drain() or stop

                if stop:
                    if self._dirty:
                        self._notify()
                    return
                if self._dirty and (
                    time.monotonic() - self._last_notify >= self.config.min_interval
                ):
                    self._notify()

    def start(self):
        """Start the background consumer thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._consume, name="update-publisher", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None):
        """Flush pending updates and stop the consumer thread."""
        if self._thread is None:
            self.pump()
            return
        self._queue.put(_STOP)
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("Publisher thread still running after stop timeout")
            return
        self._thread = None

    def close(self):
        """Detach from the store and stop."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.stop()
