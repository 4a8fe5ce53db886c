"""
Transcript Reconstitution

Rebuilds a complete, ordered, deduplicated record set from a virtualized
source that only materializes a window of its content at a time, and crops
previously-numbered transcripts without losing provenance.

LAYER STRUCTURE:
================

1. CONTRACTS (contracts/)
   - Immutable data model shared by every layer
   - Error taxonomy (InvalidSpec, TranscriptFormatError, ...)

2. EXTRACTION (extraction/)
   - Responsibility: turn a snapshot's markup into RawRecords
   - Provides a windowed VirtualizedSource for offline replay
   - MUST NOT: deduplicate, order or number records

3. HARVEST (harvest/)
   - Responsibility: drive materialization, merge observations, order, number
   - Allowed inputs: any VirtualizedSource
   - Outputs: NumberedRecord sequence (immutable)

4. STORAGE (storage/)
   - Responsibility: persist and read transcript documents
   - MUST NOT: recompute counters

5. SELECTION (selection/)
   - Responsibility: parse range specs, crop by ORIGINAL global index
   - MUST NOT: reorder records or touch original counters
"""

from .contracts.base import (
    ErrorCode,
    ReconstitutionError,
    InvalidSpec,
    TranscriptFormatError,
    SnapshotUnavailable,
    ConfigError,
)
from .contracts.records import (
    Category,
    RawRecord,
    Record,
    Group,
    RunningTotals,
    NumberedRecord,
)
from .config import HarvestConfig, load_config
from .harvest import Harvester, HarvestReport, StopReason, harvest
from .selection import parse_range_spec, select_subset, RangeSpec, SelectionResult

__version__ = "0.1.0"

__all__ = [
    "ErrorCode",
    "ReconstitutionError",
    "InvalidSpec",
    "TranscriptFormatError",
    "SnapshotUnavailable",
    "ConfigError",
    "Category",
    "RawRecord",
    "Record",
    "Group",
    "RunningTotals",
    "NumberedRecord",
    "HarvestConfig",
    "load_config",
    "Harvester",
    "HarvestReport",
    "StopReason",
    "harvest",
    "parse_range_spec",
    "select_subset",
    "RangeSpec",
    "SelectionResult",
]
