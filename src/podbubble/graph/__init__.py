# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Graph model and store.

"""
Graph model and thread-safe store.

The store holds Group and Member nodes and the edges between them,
and notifies subscribers of every mutation.
"""

from .models import (
    NodeCategory,
    Point,
    Node,
    Edge,
    GraphSnapshot,
    NodeAdded,
    EdgeAdded,
    NodeMoved,
    PositionsUpdated,
    StoreEvent,
)
from .store import GraphStore

__all__ = [
    'NodeCategory',
    'Point',
    'Node',
    'Edge',
    'GraphSnapshot',
    'NodeAdded',
    'EdgeAdded',
    'NodeMoved',
    'PositionsUpdated',
    'StoreEvent',
    'GraphStore',
]
