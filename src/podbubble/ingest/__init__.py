# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
"""Group records and the incremental ingestion driver."""

from .records import (
    GroupRecord,
    parse_record,
    split_member_labels,
    DEFAULT_GROUPS,
)
from .driver import IngestionDriver, IngestReport, IngestResult

__all__ = [
    'GroupRecord',
    'parse_record',
    'split_member_labels',
    'DEFAULT_GROUPS',
    'IngestionDriver',
    'IngestReport',
    'IngestResult',
]
