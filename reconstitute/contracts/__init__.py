"""
Contracts

Immutable data model and error taxonomy. Every other layer imports from here;
this package imports from no other layer.
"""

from .base import (
    ErrorCode,
    ReconstitutionError,
    InvalidSpec,
    TranscriptFormatError,
    SnapshotUnavailable,
    ConfigError,
)
from .records import (
    Category,
    CATEGORY_PRECEDENCE,
    RawRecord,
    Record,
    Group,
    RunningTotals,
    NumberedRecord,
)

__all__ = [
    "ErrorCode",
    "ReconstitutionError",
    "InvalidSpec",
    "TranscriptFormatError",
    "SnapshotUnavailable",
    "ConfigError",
    "Category",
    "CATEGORY_PRECEDENCE",
    "RawRecord",
    "Record",
    "Group",
    "RunningTotals",
    "NumberedRecord",
]
