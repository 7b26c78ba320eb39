# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
"""
GraphModel - The store, layout engine, ingestion driver and publisher
wired together, plus the events a UI sends into the core.

Usage:
    from podbubble import GraphModel, DEFAULT_GROUPS

    with GraphModel() as model:
        model.subscribe(lambda state: draw(state))
        model.load(DEFAULT_GROUPS)                  # progressive, background
        model.on_drag_changed(node_id, (120, 340))  # pins the node
        model.on_add_group('ATP', 'Marco, Casey, John')
        model.wait()
"""

import random
from typing import Iterable, Optional, Sequence, Union
import logging

from .config import Settings
from .errors import InvalidReference, MalformedIngestionRecord
from .graph import GraphStore, GraphSnapshot, Node
from .ingest import (
    DEFAULT_GROUPS,
    GroupRecord,
    IngestionDriver,
    IngestReport,
    IngestResult,
    split_member_labels,
)
from .layout import LayoutEngine
from .publish import UpdatePublisher, RenderState

logger = logging.getLogger(__name__)


class GraphModel:
    """Interactive graph of groups and members with live layout."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        start_publisher: bool = True
    ):
        """
        Args:
            settings: Configuration (default: Settings()).
            rng: Random source for placement and ids; defaults to one
                 seeded from settings.seed.
            start_publisher: Run the publisher's consumer thread. Tests
                             pass False and call pump() themselves.
        """
        self.settings = settings or Settings()
        rng = rng or random.Random(self.settings.seed)

        self.store = GraphStore(self.settings.layout, rng)
        self.publisher = UpdatePublisher(self.store, self.settings.publisher)
        self.engine = LayoutEngine(self.store, self.settings.layout)
        self.engine.subscribe_status(self.publisher.publish_status)
        self.driver = IngestionDriver(self.store, self.settings.ingest, self.engine)

        if start_publisher:
            self.publisher.start()

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------

    def load(
        self,
        records: Iterable = DEFAULT_GROUPS,
        background: bool = True
    ) -> Optional[IngestReport]:
        """
        Progressively ingest records, then lay out the graph.

        With background=True ingestion runs on its own thread and None
        is returned; use wait() to block until it and the layout finish.
        """
        if background:
            self.driver.start(records)
            return None
        return self.driver.ingest(records)

    def on_add_group(
        self,
        label: str,
        member_labels: Union[str, Sequence[str]]
    ) -> Optional[IngestResult]:
        """
        Add one group from a UI form and re-run the layout.

        Args:
            label: Group label.
            member_labels: Comma-separated string or a list of labels.

        Returns:
            The ingest result, or None if the input was rejected.
        """
        if isinstance(member_labels, str):
            member_labels = split_member_labels(member_labels)

        try:
            result = self.driver.ingest_group(
                GroupRecord(group_label=label, member_labels=tuple(member_labels))
            )
        except MalformedIngestionRecord as e:
            logger.warning(f"Rejected new group: {e}")
            return None

        self.engine.request_layout()
        return result

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def on_drag_changed(self, node_id: str, point: Sequence[float]) -> Optional[Node]:
        """Move a node under the pointer and pin it there."""
        try:
            return self.store.set_position(node_id, point, mark_pinned=True)
        except InvalidReference as e:
            logger.warning(f"Ignoring drag: {e}")
            return None

    def on_drag_ended(self, node_id: str, release: bool = False) -> Optional[Node]:
        """
        Finish a drag. The node stays pinned unless release is set, in
        which case it rejoins the simulation on the next run.
        """
        if not release:
            return None
        try:
            return self.store.set_pinned(node_id, False)
        except InvalidReference as e:
            logger.warning(f"Ignoring drag end: {e}")
            return None

    def reset_view(self) -> int:
        """Re-run the layout on the current graph."""
        return self.engine.request_layout()

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def is_processing(self) -> bool:
        return self.engine.is_running

    def subscribe(self, observer):
        return self.publisher.subscribe(observer)

    @property
    def state(self) -> RenderState:
        return self.publisher.state

    def snapshot(self) -> GraphSnapshot:
        return self.store.snapshot()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until ingestion and layout are idle."""
        if not self.driver.wait(timeout):
            return False
        return self.engine.wait(timeout)

    def close(self):
        self.driver.stop()
        # an ingest past its last stop check may still request a layout
        self.driver.wait()
        self.engine.stop()
        self.publisher.close()

    def __enter__(self) -> 'GraphModel':
        return self

    def __exit__(self, *exc):
        self.close()
        return False
