# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# JSON Lines I/O for group records and laid-out graphs.

"""
JSON Lines I/O for podbubble.

Input is one group record per line; output is one node, edge or
position object per line.

Usage:
    from podbubble.io import read_groups, write_snapshot

    records = list(read_groups(sys.stdin))
    write_snapshot(model.snapshot(), sys.stdout)
"""

import json
import sys
from typing import Any, Dict, Iterator, TextIO
import logging

from .graph.models import GraphSnapshot, Point

logger = logging.getLogger(__name__)


# ============================================================================
# READER FUNCTIONS
# ============================================================================

def read_jsonl(stream: TextIO = sys.stdin) -> Iterator[Dict[str, Any]]:
    """Read raw JSON objects from a JSON Lines stream."""
    for lineno, line in enumerate(stream, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            yield json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning(f"Skipping undecodable line {lineno}: {e}")


def read_groups(stream: TextIO = sys.stdin) -> Iterator[Dict[str, Any]]:
    """
    Read raw group records.

    Records are validated later by the ingestion driver, which skips
    malformed ones, so everything that decodes is passed through.
    """
    for obj in read_jsonl(stream):
        if isinstance(obj, dict) and obj.get("type", "group") != "group":
            continue
        yield obj


# ============================================================================
# WRITER FUNCTIONS
# ============================================================================

def write_jsonl(obj: Dict[str, Any], stream: TextIO = sys.stdout) -> None:
    """Write a JSON object as a single line."""
    print(json.dumps(obj, ensure_ascii=False), file=stream)


def write_position(
    node_id: str, point: Point, stream: TextIO = sys.stdout
) -> None:
    """Write a position object."""
    write_jsonl({"type": "position", "id": node_id, "x": point[0], "y": point[1]}, stream)


def write_positions(
    positions: Dict[str, Point],
    stream: TextIO = sys.stdout
) -> None:
    """Write a positions dict as JSON Lines."""
    for node_id, point in positions.items():
        write_position(node_id, point, stream)


def write_snapshot(
    snapshot: GraphSnapshot,
    stream: TextIO = sys.stdout,
    positions: bool = True
) -> None:
    """Write every node, then every edge, then (optionally) positions."""
    for node in snapshot.nodes.values():
        write_jsonl(node.to_dict(), stream)
    for edge in snapshot.edges:
        write_jsonl(edge.to_dict(), stream)
    if positions:
        write_positions(snapshot.positions(), stream)
