# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Exception taxonomy for the podbubble core.

"""
Errors raised by the graph store, ingestion and configuration layers.

None of these are fatal: callers skip the offending unit of work
(a record, a drag event, a position write) and carry on.
"""

from typing import Any, Optional


class PodbubbleError(Exception):
    """Base class for all podbubble errors."""


class InvalidReference(PodbubbleError, KeyError):
    """An edge or position update referenced a node id not in the store."""

    def __init__(self, node_id: Any, message: Optional[str] = None):
        self.node_id = node_id
        self.message = message or f"unknown node id: {node_id!r}"
        super().__init__(self.message)

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return self.message


class MalformedIngestionRecord(PodbubbleError, ValueError):
    """An ingestion record is missing its group label or member list."""

    def __init__(self, record: Any, reason: str):
        self.record = record
        self.reason = reason
        super().__init__(f"malformed ingestion record ({reason}): {record!r}")


class ConfigError(PodbubbleError, ValueError):
    """A configuration value is out of range or unreadable."""
