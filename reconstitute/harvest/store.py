"""
Accumulated Store

Per-session state of a harvest: groups, the identity index, and the
discovery and stall counters.

GUARANTEES:
===========
1. An identity appears at most once in the store
2. Re-observation merges, never duplicates
3. Merging never drops an attachment name or non-empty content
4. Counters live on the state object, never at module level
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List
import logging

from ..contracts.records import Group, RawRecord, Record
from .identity import record_identity


_logger = logging.getLogger(__name__)


@dataclass
class HarvestState:
    """
    Mutable state owned by exactly one harvest session.

    Never share an instance between sessions.
    """
    groups: Dict[str, Group] = field(default_factory=dict)
    records: Dict[str, Record] = field(default_factory=dict)
    discovery_counter: int = 0
    stall: int = 0
    iterations: int = 0
    passes: int = 0
    skipped_observations: int = 0

    @property
    def record_count(self) -> int:
        return len(self.records)

    def next_discovery_order(self) -> int:
        order = self.discovery_counter
        self.discovery_counter += 1
        return order


def _union(existing: List[str], incoming: Iterable[str]) -> bool:
    changed = False
    seen = set(existing)
    for name in incoming:
        if name and name not in seen:
            existing.append(name)
            seen.add(name)
            changed = True
    return changed


def _more_complete(current: str, candidate: str) -> bool:
    """Candidate replaces current only if non-empty and strictly longer."""
    return bool(candidate.strip()) and len(candidate.strip()) > len(current.strip())


def merge_record(record: Record, raw: RawRecord) -> bool:
    """
    Merge a re-observation into an existing record.

    Returns True if the record gained content or attachments.
    """
    changed = _union(record.attachments, raw.attachments)
    if _more_complete(record.rich_content, raw.rich_content):
        record.rich_content = raw.rich_content
        changed = True
    if _more_complete(record.plain_text, raw.plain_text):
        record.plain_text = raw.plain_text
        changed = True
    return changed


def _is_usable(raw: RawRecord) -> bool:
    return bool(raw.group_id and raw.role and raw.role.strip() and raw.has_content)


def merge_observations(state: HarvestState, observations: Iterable[RawRecord]) -> int:
    """
    Merge one extraction pass into the store.

    Returns the number of newly created groups and records plus records
    whose content was upgraded by the merge.
    """
    added = 0
    state.passes += 1

    for raw in observations:
        if not _is_usable(raw):
            state.skipped_observations += 1
            continue

        group = state.groups.get(raw.group_id)
        if group is None:
            group = Group(
                group_id=raw.group_id,
                discovery_order=state.next_discovery_order(),
                group_order=raw.group_order,
            )
            state.groups[raw.group_id] = group
            added += 1
        elif group.group_order is None and raw.group_order is not None:
            group.group_order = raw.group_order

        identity = record_identity(raw)
        record = state.records.get(identity)
        if record is None:
            record = Record(
                identity=identity,
                role=raw.role.strip().lower(),
                category=raw.category,
                group_id=group.group_id,
                rich_content=raw.rich_content,
                plain_text=raw.plain_text,
                attachments=[],
            )
            _union(record.attachments, raw.attachments)
            state.records[identity] = record
            group.records[identity] = record
            added += 1
        elif merge_record(record, raw):
            added += 1

    _logger.debug(
        "merge pass %d: added=%d groups=%d records=%d",
        state.passes, added, len(state.groups), len(state.records)
    )
    return added
