"""
Ordering and Numbering

Turns the accumulated store into the final numbered sequence.

ORDER:
======
1. Groups with a known group_order, ascending
2. Groups without one, after ALL ordered groups, by discovery_order
3. Inside a group: user, then assistant, then others (first-seen order)

Counters are assigned by a single forward pass over the flattened sequence.
"""

from __future__ import annotations
from typing import Iterable, Iterator, List, Tuple

from ..contracts.records import (
    CATEGORY_PRECEDENCE, Category, Group, NumberedRecord, Record, RunningTotals
)


def group_sort_key(group: Group) -> Tuple[int, int, int]:
    if group.has_order:
        return (0, group.group_order, group.discovery_order)
    return (1, group.discovery_order, 0)


def order_groups(groups: Iterable[Group]) -> List[Group]:
    """Sort groups by order hint, falling back to discovery order."""
    return sorted(groups, key=group_sort_key)


def flatten(groups: Iterable[Group]) -> Iterator[Tuple[Group, Record]]:
    """Yield (group, record) pairs in output order."""
    for group in groups:
        records = sorted(
            group.records.values(),
            key=lambda r: CATEGORY_PRECEDENCE[r.category]
        )
        for record in records:
            yield group, record


def number_records(ordered_groups: Iterable[Group]) -> Tuple[NumberedRecord, ...]:
    """Assign global index, per-category index and running totals."""
    numbered = []
    user_count = 0
    assistant_count = 0

    for position, (group, record) in enumerate(flatten(ordered_groups), start=1):
        category_index = None
        if record.category is Category.USER:
            user_count += 1
            category_index = user_count
        elif record.category is Category.ASSISTANT:
            assistant_count += 1
            category_index = assistant_count

        numbered.append(NumberedRecord(
            identity=record.identity,
            role=record.role,
            category=record.category,
            group_id=group.group_id,
            group_order=group.group_order,
            rich_content=record.rich_content,
            plain_text=record.plain_text,
            attachments=tuple(record.attachments),
            global_index=position,
            category_index=category_index,
            running_totals=RunningTotals(user=user_count, assistant=assistant_count),
        ))

    return tuple(numbered)
