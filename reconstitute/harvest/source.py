"""
Virtualized Source Contract

Interface the harvester drives. Implementations wrap whatever actually
renders the content (a browser page, a replayed snapshot, a test fake).

CONTRACT:
=========
- materialize_more() is best-effort and may be a no-op at the end
- position + step never exceeds the extent reported by geometry()
- extract_visible() returns only what is materialized right now
- Calls are never issued concurrently against one source
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from ..contracts.records import RawRecord


@dataclass(frozen=True)
class ViewportGeometry:
    """Scroll geometry of the source, in source units (e.g. pixels)."""
    position: int
    viewport: int
    extent: int

    def step_for(self, fraction: float) -> int:
        """Step size for advancing by a fraction of the viewport."""
        return max(1, int(self.viewport * fraction))

    def target_for(self, step: int) -> int:
        """Next position, capped at the extent."""
        return min(self.position + step, self.extent)


class VirtualizedSource(ABC):
    """A container that only materializes a window of its content."""

    @abstractmethod
    def geometry(self) -> ViewportGeometry:
        raise NotImplementedError

    @abstractmethod
    def materialize_more(self, position: int, step: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def extract_visible(self) -> List[RawRecord]:
        raise NotImplementedError

    def at_end(self, epsilon: int = 10) -> bool:
        """True when the viewport touches the end of the extent."""
        g = self.geometry()
        return g.position + g.viewport >= g.extent - epsilon
