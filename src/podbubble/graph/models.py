# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Graph data model: nodes, edges, snapshots and store events.

"""
Immutable value types shared by the store, layout engine and publisher.

Nodes and edges are frozen dataclasses. The store replaces a Node
whenever its position or pinned flag changes, so any Node handed out
(in a snapshot or an event) never changes underneath its holder.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Tuple, NamedTuple, Union, Any


class NodeCategory(Enum):
    """Kind of entity a node stands for."""
    GROUP = "Group"
    MEMBER = "Member"

    @property
    def color(self) -> str:
        """Colour hint for renderers."""
        return _CATEGORY_COLORS[self]


_CATEGORY_COLORS = {
    NodeCategory.GROUP: "blue",
    NodeCategory.MEMBER: "red",
}


class Point(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True)
class Node:
    """A graph node."""
    id: str
    label: str
    category: NodeCategory
    position: Point
    pinned: bool = False

    def moved_to(self, position: Point, pinned: bool = None) -> 'Node':
        """Copy of this node at a new position (optionally re-pinned)."""
        return replace(
            self,
            position=Point(float(position[0]), float(position[1])),
            pinned=self.pinned if pinned is None else pinned,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "type": "node",
            "id": self.id,
            "label": self.label,
            "category": self.category.value,
            "x": self.position.x,
            "y": self.position.y,
            "pinned": self.pinned,
        }


@dataclass(frozen=True)
class Edge:
    """
    A graph edge.

    Stored with a from/to orientation (group -> member) but undirected
    for force purposes.
    """
    id: str
    from_id: str
    to_id: str

    def touches(self, node_id: str) -> bool:
        return self.from_id == node_id or self.to_id == node_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "type": "edge",
            "id": self.id,
            "from": self.from_id,
            "to": self.to_id,
        }


@dataclass(frozen=True)
class GraphSnapshot:
    """Point-in-time copy of the store's nodes and edges."""
    nodes: Dict[str, Node] = field(default_factory=dict)
    edges: Tuple[Edge, ...] = ()
    generation: int = 0

    def __len__(self) -> int:
        return len(self.nodes)

    def positions(self) -> Dict[str, Point]:
        return {nid: node.position for nid, node in self.nodes.items()}

    def members(self) -> Tuple[Node, ...]:
        return tuple(n for n in self.nodes.values() if n.category is NodeCategory.MEMBER)

    def groups(self) -> Tuple[Node, ...]:
        return tuple(n for n in self.nodes.values() if n.category is NodeCategory.GROUP)


# ============================================================================
# STORE EVENTS
# ============================================================================

@dataclass(frozen=True)
class NodeAdded:
    """A node was created; carries its initial position."""
    node: Node


@dataclass(frozen=True)
class EdgeAdded:
    edge: Edge


@dataclass(frozen=True)
class NodeMoved:
    """A node was moved or (un)pinned from outside the layout engine."""
    node: Node


@dataclass(frozen=True)
class PositionsUpdated:
    """One layout iteration was written back to the store."""
    positions: Dict[str, Point]
    iteration: int
    generation: int


StoreEvent = Union[NodeAdded, EdgeAdded, NodeMoved, PositionsUpdated]
