"""
Windowed Snapshot Source

Replays an in-memory record list through a sliding viewport, so a harvest
can run offline against a saved page exactly as it would against a live
virtualized list.

MODEL:
======
- Each group (turn) occupies one row of `row_height` units
- Only groups whose row intersects [position - overscan,
  position + viewport + overscan) are materialized
- Scrolling is clamped at extent - viewport, like a browser scroller
"""

from __future__ import annotations
from typing import Dict, List, Sequence

from ..contracts.base import ConfigError
from ..contracts.records import RawRecord
from ..harvest.source import ViewportGeometry, VirtualizedSource


class SnapshotWindowSource(VirtualizedSource):
    """A VirtualizedSource over a fixed list of records."""

    def __init__(
        self,
        records: Sequence[RawRecord],
        row_height: int = 100,
        viewport: int = 800,
        overscan: int = 200
    ):
        if row_height < 1:
            raise ConfigError("row_height must be >= 1")
        if viewport < 1:
            raise ConfigError("viewport must be >= 1")
        if overscan < 0:
            raise ConfigError("overscan must be >= 0")

        self._row_height = row_height
        self._viewport = viewport
        self._overscan = overscan
        self._position = 0
        self.materialize_calls = 0

        rows: Dict[str, List[RawRecord]] = {}
        for record in records:
            rows.setdefault(record.group_id, []).append(record)
        self._rows: List[List[RawRecord]] = list(rows.values())

    @property
    def extent(self) -> int:
        return len(self._rows) * self._row_height

    @property
    def max_position(self) -> int:
        return max(0, self.extent - self._viewport)

    def geometry(self) -> ViewportGeometry:
        return ViewportGeometry(
            position=self._position,
            viewport=self._viewport,
            extent=self.extent,
        )

    def scroll_to(self, position: int) -> None:
        self._position = min(max(0, position), self.max_position)

    def materialize_more(self, position: int, step: int) -> None:
        self.materialize_calls += 1
        self.scroll_to(position + step)

    def visible_rows(self) -> range:
        top = self._position - self._overscan
        bottom = self._position + self._viewport + self._overscan
        first = max(0, top // self._row_height)
        last = min(len(self._rows), -(-bottom // self._row_height))
        return range(first, last)

    def extract_visible(self) -> List[RawRecord]:
        visible = []
        for row in self.visible_rows():
            visible.extend(self._rows[row])
        return visible
