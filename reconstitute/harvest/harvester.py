"""
Harvester

Drives a virtualized source until no new content is reachable, merging
every pass into a per-session store, then orders and numbers the result.

LOOP:
=====
1. Extract + merge what is already materialized
2. Repeat while the stall counter is below the retry ceiling:
   a. Extract + merge; count additions
   b. No additions -> stall += 1, else stall = 0
   c. At the end of the extent with a confirmed stall -> final pass, stop
   d. Otherwise advance by a fraction of the viewport, capped at the
      extent, and wait to settle
3. Order, flatten, number

GUARANTEES:
===========
- Always terminates once the source stops yielding new content
- Hitting the retry ceiling is a stop reason, not an error
- Partial results are valid, correctly numbered results
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Tuple
import logging
import time

from ..config import HarvestConfig
from ..contracts.records import Category, NumberedRecord
from .ordering import number_records, order_groups
from .source import VirtualizedSource
from .store import HarvestState, merge_observations


_logger = logging.getLogger(__name__)


class StopReason(Enum):
    """Why a harvest ended."""
    CONVERGED = "converged"
    RETRY_CEILING = "retry_ceiling"


@dataclass(frozen=True)
class HarvestReport:
    """Result of one harvest session."""
    records: Tuple[NumberedRecord, ...]
    stop_reason: StopReason
    group_count: int
    iterations: int
    passes: int
    started_at: datetime
    completed_at: datetime
    skipped_observations: int = 0

    @property
    def total(self) -> int:
        return len(self.records)

    @property
    def user_total(self) -> int:
        return sum(1 for r in self.records if r.category is Category.USER)

    @property
    def assistant_total(self) -> int:
        return sum(1 for r in self.records if r.category is Category.ASSISTANT)

    @property
    def converged(self) -> bool:
        return self.stop_reason is StopReason.CONVERGED

    def summary(self) -> dict:
        return {
            'turns': self.group_count,
            'messages': self.total,
            'user': self.user_total,
            'assistant': self.assistant_total,
            'stop_reason': self.stop_reason.value,
            'iterations': self.iterations,
            'passes': self.passes,
            'skipped_observations': self.skipped_observations,
            'started_at': self.started_at.isoformat(),
            'completed_at': self.completed_at.isoformat(),
        }


class Harvester:
    """
    One harvest session over one source.

    Each run() starts from a fresh HarvestState; states are never shared.
    """

    def __init__(
        self,
        source: VirtualizedSource,
        config: Optional[HarvestConfig] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self._source = source
        self._config = config or HarvestConfig()
        self._sleep = sleep
        self._state = HarvestState()

    @property
    def state(self) -> HarvestState:
        return self._state

    @property
    def config(self) -> HarvestConfig:
        return self._config

    def _harvest_pass(self) -> int:
        return merge_observations(self._state, self._source.extract_visible())

    def _advance(self) -> None:
        geometry = self._source.geometry()
        target = geometry.target_for(geometry.step_for(self._config.step_fraction))
        self._source.materialize_more(geometry.position, target - geometry.position)
        self._sleep(self._config.settle_delay)

    def run(self) -> HarvestReport:
        """Harvest until convergence or the retry ceiling."""
        config = self._config
        self._state = state = HarvestState()
        started_at = datetime.now(timezone.utc)
        stop_reason = StopReason.RETRY_CEILING

        self._harvest_pass()

        while state.stall < config.stall_limit:
            added = self._harvest_pass()
            state.iterations += 1
            state.stall = 0 if added else state.stall + 1

            at_end = self._source.at_end(config.end_epsilon)
            _logger.debug(
                "iteration %d: added=%d stall=%d at_end=%s",
                state.iterations, added, state.stall, at_end
            )

            if at_end and state.stall >= config.confirm_stall:
                self._harvest_pass()
                stop_reason = StopReason.CONVERGED
                break

            self._advance()

        records = number_records(order_groups(state.groups.values()))
        report = HarvestReport(
            records=records,
            stop_reason=stop_reason,
            group_count=sum(1 for g in state.groups.values() if g.records),
            iterations=state.iterations,
            passes=state.passes,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
            skipped_observations=state.skipped_observations,
        )

        if report.converged:
            _logger.info(
                "harvest converged: %d turns, %d records after %d iterations",
                report.group_count, report.total, report.iterations
            )
        else:
            _logger.info(
                "harvest hit retry ceiling (%d stalled passes): %d turns, %d records",
                config.stall_limit, report.group_count, report.total
            )
        return report


def harvest(
    source: VirtualizedSource,
    config: Optional[HarvestConfig] = None,
    sleep: Callable[[float], None] = time.sleep
) -> Tuple[NumberedRecord, ...]:
    """Harvest a source and return the ordered, numbered records."""
    return Harvester(source, config=config, sleep=sleep).run().records
