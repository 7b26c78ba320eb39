# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
"""Renderer-facing update publisher."""

from .publisher import UpdatePublisher, RenderState, StatusChanged

__all__ = ['UpdatePublisher', 'RenderState', 'StatusChanged']
