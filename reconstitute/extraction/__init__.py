"""
Extraction Layer

RESPONSIBILITY: Read RawRecords out of page markup and expose saved pages
as VirtualizedSources.

WHAT THIS LAYER MUST NOT DO:
============================
- Deduplicate, order or number records
- Render or style output
"""

from .dom import Element, parse_html
from .markup import (
    basename,
    extract_attachments,
    extract_message,
    extract_turn,
    looks_like_filename,
    parse_turn_order,
    parse_turns,
)
from .snapshot import fetch_snapshot, is_remote, load_snapshot, read_snapshot
from .window import SnapshotWindowSource

__all__ = [
    "Element",
    "parse_html",
    "basename",
    "extract_attachments",
    "extract_message",
    "extract_turn",
    "looks_like_filename",
    "parse_turn_order",
    "parse_turns",
    "fetch_snapshot",
    "is_remote",
    "load_snapshot",
    "read_snapshot",
    "SnapshotWindowSource",
]
