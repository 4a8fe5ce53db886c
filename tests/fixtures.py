"""
Harvest Fixtures

Scripted virtualized sources and record builders for harvest tests.

RULES:
======
1. All sources are EXPLICIT, not random
2. Each source declares when it reaches the end of its extent
3. No source ever sleeps; tests pass a recording sleep instead
"""

from __future__ import annotations
from typing import List, Optional, Sequence

from reconstitute.contracts.records import RawRecord
from reconstitute.harvest.source import ViewportGeometry, VirtualizedSource


FRAME_HEIGHT = 100


# =============================================================================
# BUILDERS
# =============================================================================

def user(group_id: str, text: str, identity: Optional[str] = None,
         order: Optional[int] = None, **kwargs) -> RawRecord:
    return RawRecord(role="user", group_id=group_id, identity=identity,
                     group_order=order, plain_text=text, **kwargs)


def assistant(group_id: str, text: str, identity: Optional[str] = None,
              order: Optional[int] = None, **kwargs) -> RawRecord:
    return RawRecord(role="assistant", group_id=group_id, identity=identity,
                     group_order=order, plain_text=text, **kwargs)


def exchange(turn: int, order: Optional[int] = None) -> List[RawRecord]:
    """One user message and one assistant reply sharing a turn."""
    group_id = f"turn-{turn}"
    return [
        user(group_id, f"question {turn}", identity=f"u-{turn}", order=order),
        assistant(group_id, f"answer {turn}", identity=f"a-{turn}", order=order),
    ]


class RecordingSleep:
    """Stands in for time.sleep; records requested delays."""

    def __init__(self):
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


# =============================================================================
# SCRIPTED SOURCES
# =============================================================================

class ScriptedSource(VirtualizedSource):
    """
    Reveals one frame of records per position.

    Frame i is materialized at position i * FRAME_HEIGHT; the extent covers
    exactly len(frames) frames, so the last frame touches the end.
    """

    def __init__(self, frames: Sequence[Sequence[RawRecord]]):
        self.frames = [list(frame) for frame in frames]
        self.frame = 0
        self.materialize_calls = 0
        self.extract_calls = 0

    def geometry(self) -> ViewportGeometry:
        return ViewportGeometry(
            position=self.frame * FRAME_HEIGHT,
            viewport=FRAME_HEIGHT,
            extent=len(self.frames) * FRAME_HEIGHT,
        )

    def materialize_more(self, position: int, step: int) -> None:
        self.materialize_calls += 1
        self.frame = min(self.frame + 1, len(self.frames) - 1)

    def extract_visible(self) -> List[RawRecord]:
        self.extract_calls += 1
        return list(self.frames[self.frame])


class EndlessSource(ScriptedSource):
    """Never reports the end of its extent and never yields anything new."""

    def geometry(self) -> ViewportGeometry:
        return ViewportGeometry(position=0, viewport=FRAME_HEIGHT, extent=10 ** 9)

    def materialize_more(self, position: int, step: int) -> None:
        self.materialize_calls += 1


class GrowingSource(ScriptedSource):
    """
    Extent grows as the viewport approaches the end (lazy loading).

    Only frames up to `loaded` exist; reaching the last loaded frame loads
    `batch` more until all frames are loaded.
    """

    def __init__(self, frames: Sequence[Sequence[RawRecord]], initial: int = 2, batch: int = 2):
        super().__init__(frames)
        self.loaded = min(initial, len(self.frames))
        self.batch = batch

    def geometry(self) -> ViewportGeometry:
        return ViewportGeometry(
            position=self.frame * FRAME_HEIGHT,
            viewport=FRAME_HEIGHT,
            extent=self.loaded * FRAME_HEIGHT,
        )

    def materialize_more(self, position: int, step: int) -> None:
        self.materialize_calls += 1
        self.frame = min(self.frame + 1, self.loaded - 1)
        if self.frame == self.loaded - 1:
            self.loaded = min(self.loaded + self.batch, len(self.frames))
