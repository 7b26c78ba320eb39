# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Entity-group records fed to the ingestion driver.

"""
Group records: a group label plus the ordered labels of its members.

Raw records may be GroupRecord instances or mappings using any of the
accepted key spellings:

    {"group_label": "TGG", "member_labels": ["Ben", "Adam"]}
    {"groupLabel": "TGG", "memberLabels": ["Ben", "Adam"]}
    {"pod": "TGG", "hosts": ["Ben", "Adam"]}
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

from ..errors import MalformedIngestionRecord

GROUP_LABEL_KEYS = ('group_label', 'groupLabel', 'label', 'pod')
MEMBER_LABEL_KEYS = ('member_labels', 'memberLabels', 'members', 'hosts')


@dataclass(frozen=True)
class GroupRecord:
    """One entity-group to ingest."""
    group_label: str
    member_labels: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "group_label": self.group_label,
            "member_labels": list(self.member_labels),
        }


RawRecord = Union[GroupRecord, Mapping[str, Any]]


def _first_present(record: Mapping[str, Any], keys: Sequence[str]):
    for key in keys:
        if key in record:
            return record[key]
    return None


def parse_record(raw: RawRecord) -> GroupRecord:
    """
    Validate a raw record.

    Raises:
        MalformedIngestionRecord: missing/blank group label, missing
            member list, or members that are not strings.
    """
    if isinstance(raw, GroupRecord):
        label, members = raw.group_label, raw.member_labels
    elif isinstance(raw, Mapping):
        label = _first_present(raw, GROUP_LABEL_KEYS)
        members = _first_present(raw, MEMBER_LABEL_KEYS)
    else:
        raise MalformedIngestionRecord(raw, "record is not a mapping")

    if not isinstance(label, str) or not label.strip():
        raise MalformedIngestionRecord(raw, "missing group label")
    if members is None:
        raise MalformedIngestionRecord(raw, "missing member list")
    if isinstance(members, str) or not isinstance(members, Sequence):
        raise MalformedIngestionRecord(raw, "member list is not a sequence")
    if not all(isinstance(m, str) for m in members):
        raise MalformedIngestionRecord(raw, "member labels must be strings")

    # blank entries (e.g. a trailing comma) are dropped
    members = tuple(m for m in members if m.strip())
    return GroupRecord(group_label=label, member_labels=members)


def split_member_labels(text: str) -> List[str]:
    """
    Split a comma-separated member list as typed into an add form.

    >>> split_member_labels(' Ben, Adam ,,Rod ')
    ['Ben', 'Adam', 'Rod']
    """
    return [part.strip() for part in text.split(',') if part.strip()]


# Seed data the interactive app starts with
DEFAULT_GROUPS: Tuple[GroupRecord, ...] = (
    GroupRecord("TGG", ("Ben", "Adam")),
    GroupRecord("FF", ("Ben", "Adam", "Rod")),
    GroupRecord("RodLine", ("Rod", "Merlin")),
    GroupRecord("FST", ("Don", "Chap", "Rod", "Casey")),
    GroupRecord("DBF", ("Don", "Merlin", "John")),
    GroupRecord("RD", ("John", "Merlin")),
    GroupRecord("ATP", ("Marco", "Casey", "John")),
)
