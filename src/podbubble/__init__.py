# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# podbubble: live force-directed layout of groups and their members.

"""
Live, interactively editable graph of groups (e.g. podcasts) and their
members (e.g. hosts), laid out by a progressive force simulation.

Components:
- graph: thread-safe GraphStore of Group/Member nodes and edges
- layout: NumPy spring-electrical simulation and background LayoutEngine
- ingest: IngestionDriver replaying group records over time
- publish: UpdatePublisher delivering throttled RenderStates
- model: GraphModel wiring them together for a UI
"""

from .config import Settings, LayoutConfig, load_settings
from .errors import (
    PodbubbleError,
    InvalidReference,
    MalformedIngestionRecord,
    ConfigError,
)
from .graph import GraphStore, Node, Edge, NodeCategory, Point, GraphSnapshot
from .ingest import GroupRecord, IngestionDriver, DEFAULT_GROUPS
from .layout import LayoutEngine, force_directed, run_layout
from .publish import UpdatePublisher, RenderState
from .model import GraphModel

__version__ = '0.1.0'

__all__ = [
    'Settings',
    'LayoutConfig',
    'load_settings',
    'PodbubbleError',
    'InvalidReference',
    'MalformedIngestionRecord',
    'ConfigError',
    'GraphStore',
    'Node',
    'Edge',
    'NodeCategory',
    'Point',
    'GraphSnapshot',
    'GroupRecord',
    'IngestionDriver',
    'DEFAULT_GROUPS',
    'LayoutEngine',
    'force_directed',
    'run_layout',
    'UpdatePublisher',
    'RenderState',
    'GraphModel',
]
