"""
Harvest Layer

RESPONSIBILITY: Reconstruct an ordered, deduplicated, numbered record set
from a virtualized source.
ALLOWED INPUTS: Any VirtualizedSource
OUTPUTS: HarvestReport / NumberedRecord sequence

WHAT THIS LAYER MUST NOT DO:
============================
- Render, style or persist records
- Share state between sessions
- Raise on non-convergence
"""

from .identity import fallback_key, normalize_text, record_identity, text_prefix_suffix
from .store import HarvestState, merge_observations, merge_record
from .ordering import flatten, group_sort_key, number_records, order_groups
from .source import ViewportGeometry, VirtualizedSource
from .harvester import Harvester, HarvestReport, StopReason, harvest

__all__ = [
    "fallback_key",
    "normalize_text",
    "record_identity",
    "text_prefix_suffix",
    "HarvestState",
    "merge_observations",
    "merge_record",
    "flatten",
    "group_sort_key",
    "number_records",
    "order_groups",
    "ViewportGeometry",
    "VirtualizedSource",
    "Harvester",
    "HarvestReport",
    "StopReason",
    "harvest",
]
