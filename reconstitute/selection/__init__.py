"""
Selection Layer

RESPONSIBILITY: Crop a numbered transcript to a range spec.
ALLOWED INPUTS: Records exposing global_index and/or index_label
OUTPUTS: SelectionResult (kept records + stats)

WHAT THIS LAYER MUST NOT DO:
============================
- Renumber original counters
- Reorder records
- Drop a record whose original index is unknown
"""

from .range_spec import RangeSpec, parse_range_spec, tokenize
from .cropper import (
    AnnotatedRecord,
    SelectionResult,
    SelectionStats,
    original_global_index,
    select_subset,
    MISSING_INDEX_WARNING,
)

__all__ = [
    "RangeSpec",
    "parse_range_spec",
    "tokenize",
    "AnnotatedRecord",
    "SelectionResult",
    "SelectionStats",
    "original_global_index",
    "select_subset",
    "MISSING_INDEX_WARNING",
]
