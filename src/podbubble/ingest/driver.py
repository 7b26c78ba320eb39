# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Progressive population of the graph store.

"""
Incremental ingestion driver.

Replays entity-group records into a GraphStore one group at a time,
pausing between groups so observers watch the graph grow. Every node
and edge is published by the store the moment it is created.
Malformed records are logged and skipped; the rest of the sequence
still runs. A layout run is requested once the sequence completes.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional
import logging
import threading

from ..config import IngestConfig
from ..errors import MalformedIngestionRecord
from .records import GroupRecord, RawRecord, parse_record

logger = logging.getLogger(__name__)


@dataclass
class IngestResult:
    """Ids touched by one ingested group."""
    record: GroupRecord
    group_id: str
    member_ids: List[str] = field(default_factory=list)
    edge_ids: List[str] = field(default_factory=list)


@dataclass
class IngestReport:
    """Outcome of one ingest() call."""
    groups: List[IngestResult] = field(default_factory=list)
    skipped: List[MalformedIngestionRecord] = field(default_factory=list)
    cancelled: bool = False
    layout_token: Optional[int] = None


class IngestionDriver:
    """
    Feeds group records into a GraphStore.

    Usage:
        driver = IngestionDriver(store, engine=engine)
        report = driver.ingest(DEFAULT_GROUPS)   # blocking
        driver.start(DEFAULT_GROUPS)             # background thread
    """

    def __init__(self, store, config: Optional[IngestConfig] = None, engine=None):
        """
        Args:
            store: GraphStore to populate.
            config: Pause between groups.
            engine: LayoutEngine to trigger after each ingest (optional).
        """
        self.store = store
        self.config = config or IngestConfig()
        self.engine = engine
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.last_report: Optional[IngestReport] = None

    def ingest_group(self, raw: RawRecord) -> IngestResult:
        """
        Add one group, its members (deduplicated by label) and the
        connecting edges. Validation happens before any mutation, so a
        malformed record leaves the store untouched.

        Raises:
            MalformedIngestionRecord: if the record is invalid.
        """
        record = parse_record(raw)

        group_id = self.store.add_group_node(record.group_label)
        result = IngestResult(record=record, group_id=group_id)

        for label in record.member_labels:
            member_id = self.store.add_or_get_member_node(label)
            result.member_ids.append(member_id)
            result.edge_ids.append(self.store.add_edge(group_id, member_id))

        logger.info(
            f"Ingested group {record.group_label!r} with {len(record.member_labels)} members"
        )
        return result

    def ingest(
        self,
        records: Iterable[RawRecord],
        request_layout: bool = True
    ) -> IngestReport:
        """
        Replay records in order, pausing config.group_pause between
        groups. Blocks until done or stop() is called.

        Args:
            records: Raw group records.
            request_layout: Trigger a layout run when the sequence ends.

        Returns:
            IngestReport listing ingested and skipped records.
        """
        # a stop() aimed at an earlier run does not cancel this one
        self._stop.clear()
        return self._replay(records, request_layout)

    def _replay(self, records: Iterable[RawRecord], request_layout: bool = True) -> IngestReport:
        report = IngestReport()
        first = True

        for raw in records:
            if self._stop.is_set():
                report.cancelled = True
                break

            try:
                record = parse_record(raw)
            except MalformedIngestionRecord as e:
                logger.warning(f"Skipping record: {e}")
                report.skipped.append(e)
                continue

            if not first and self.config.group_pause > 0:
                if self._stop.wait(self.config.group_pause):
                    report.cancelled = True
                    break
            first = False

            report.groups.append(self.ingest_group(record))

        logger.info(
            f"Ingestion {'cancelled' if report.cancelled else 'finished'}: "
            f"{len(report.groups)} groups, {len(report.skipped)} skipped"
        )

        if request_layout and self.engine is not None and not report.cancelled:
            report.layout_token = self.engine.request_layout()

        self.last_report = report
        return report

    def start(self, records: Iterable[RawRecord]) -> threading.Thread:
        """Run ingest(records) on a background thread."""
        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("ingestion already in progress")

        self._stop.clear()
        records = list(records)
        self._thread = threading.Thread(
            target=self._replay,
            args=(records,),
            name="ingestion",
            daemon=True,
        )
        self._thread.start()
        return self._thread

    def stop(self):
        """Cancel a running ingest() at its next pause."""
        self._stop.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Join the background ingestion thread. True if it has finished."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()
