"""
Cropper

Keeps only the records whose ORIGINAL global index is selected and adds a
new position-in-selection counter.

COUNTER BEHAVIOR:
=================
- Original counters (global index, category index, running totals) are
  never renumbered; they cross-reference the source transcript
- Each kept record gains (selection_position, selection_total)
- Selection never reorders records

SAFE DEFAULT:
=============
A record whose original index cannot be recovered is KEPT and flagged
(missing_original_index). The count is always reported in the stats.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple, Union
import logging
import re

from ..contracts.base import ErrorCode
from .range_spec import RangeSpec, parse_range_spec


_logger = logging.getLogger(__name__)

_LABEL_INDEX = re.compile(r"#\s*([0-9]+)")

MISSING_INDEX_WARNING = "missing-original-global-index"
CROP_NOTE = (
    "Original counters preserved for cross-reference; "
    "selection k/N added for the cropped sequence."
)


def original_global_index(record: Any) -> Optional[int]:
    """
    Read back the originally assigned global index.

    The numeric field is authoritative; a label such as "Index #12" is the
    fallback. Returns None when neither is usable.
    """
    value = getattr(record, 'global_index', None)
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value

    label = getattr(record, 'index_label', None)
    if isinstance(label, str):
        match = _LABEL_INDEX.search(label)
        if match:
            parsed = int(match.group(1))
            if parsed > 0:
                return parsed
    return None


@dataclass(frozen=True)
class AnnotatedRecord:
    """A kept record plus its selection counter. `record` is untouched."""
    record: Any
    selection_position: int
    selection_total: int
    original_index: Optional[int]

    @property
    def missing_original_index(self) -> bool:
        return self.original_index is None

    @property
    def selection_label(self) -> str:
        return f"KEEP {self.selection_position}/{self.selection_total}"

    def to_dict(self) -> dict:
        payload = dict(self.record.to_dict())
        payload['selection'] = {
            'position': self.selection_position,
            'total': self.selection_total,
        }
        if self.missing_original_index:
            payload['crop_warning'] = MISSING_INDEX_WARNING
        else:
            payload.pop('crop_warning', None)
        return payload


@dataclass(frozen=True)
class SelectionStats:
    """Selection counts. kept + removed == total."""
    total: int
    kept: int
    removed: int
    missing_original_index: int

    def to_dict(self) -> dict:
        payload = {
            'total': self.total,
            'kept': self.kept,
            'removed': self.removed,
            'missing_original_index': self.missing_original_index,
            'note': CROP_NOTE,
        }
        if self.missing_original_index:
            payload['warning'] = {
                'code': ErrorCode.MISSING_ORIGINAL_INDEX.name,
                'count': self.missing_original_index,
            }
        return payload


@dataclass(frozen=True)
class SelectionResult:
    kept: Tuple[AnnotatedRecord, ...]
    stats: SelectionStats
    spec: RangeSpec


def select_subset(
    records: Sequence[Any],
    range_spec: Union[str, RangeSpec]
) -> SelectionResult:
    """
    Filter numbered records by original global index and re-annotate.

    Raises:
        InvalidSpec: if `range_spec` is a string that parses to no index.
    """
    spec = range_spec if isinstance(range_spec, RangeSpec) else parse_range_spec(range_spec)

    survivors = []
    removed = 0
    missing = 0

    for record in records:
        if isinstance(record, AnnotatedRecord):
            record = record.record
        index = original_global_index(record)
        if index is None:
            missing += 1
            survivors.append((record, None))
            continue
        if index in spec:
            survivors.append((record, index))
        else:
            removed += 1

    total_kept = len(survivors)
    kept = tuple(
        AnnotatedRecord(
            record=record,
            selection_position=position,
            selection_total=total_kept,
            original_index=index,
        )
        for position, (record, index) in enumerate(survivors, start=1)
    )

    if missing:
        _logger.warning(
            "kept %d record(s) without a recoverable original index", missing
        )

    stats = SelectionStats(
        total=len(records),
        kept=total_kept,
        removed=removed,
        missing_original_index=missing,
    )
    return SelectionResult(kept=kept, stats=stats, spec=spec)
