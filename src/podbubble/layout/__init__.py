# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Layout algorithms for the podbubble graph.

"""
Layout for the podbubble graph.

Provides a NumPy-accelerated spring-electrical simulation:
- force_step: one vectorized iteration over position arrays
- force_directed: one iteration over a GraphSnapshot
- run_layout: progressive iteration against a live GraphStore
- LayoutEngine: background runner with superseding runs
"""

from .force_directed import (
    LayoutFrame,
    snapshot_arrays,
    force_step,
    force_directed,
    run_layout,
)
from .engine import LayoutEngine, LayoutRun

__all__ = [
    'LayoutFrame',
    'snapshot_arrays',
    'force_step',
    'force_directed',
    'run_layout',
    'LayoutEngine',
    'LayoutRun',
]
