# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
"""Configuration for the podbubble layout core."""

from .settings import (
    Bounds,
    LayoutConfig,
    IngestConfig,
    PublisherConfig,
    Settings,
    load_settings,
)

__all__ = [
    'Bounds',
    'LayoutConfig',
    'IngestConfig',
    'PublisherConfig',
    'Settings',
    'load_settings',
]
