"""Running per-contributor and global statistics"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from contribution_ledger.errors import ArithmeticOverflow
from contribution_ledger.models.contribution import (
    MAX_AMOUNT,
    ContributionRecord,
    ContributorStats,
    GlobalStats,
)

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class StagedUpdate:
    """Statistics after a record is applied, computed but not yet committed"""
    contributor: str
    contributor_stats: ContributorStats
    total_value_received: int
    total_record_count: int
    total_gasless_count: int

def _checked_add(current: int, increment: int, field: str) -> int:
    result = current + increment
    if result > MAX_AMOUNT:
        raise ArithmeticOverflow(f"{field} would exceed {MAX_AMOUNT}")
    return result

class Aggregator:
    """
    Derives statistics from records handed over at append time.

    History is never re-scanned, so each update is O(1). Updates are split
    into a pure stage() that may raise ArithmeticOverflow and an apply()
    that cannot fail, which keeps every update all-or-nothing.
    """

    def __init__(self):
        # insertion order of this dict is first-seen order of contributors
        self._stats: Dict[str, ContributorStats] = {}
        self._total_value_received = 0
        self._total_record_count = 0
        self._total_gasless_count = 0

    @classmethod
    def replay(cls, records: Iterable[ContributionRecord]) -> 'Aggregator':
        """Rebuild statistics from empty state by replaying records in order"""
        aggregator = cls()
        for record in records:
            aggregator.on_append(record)
        return aggregator

    def clone(self) -> 'Aggregator':
        """Independent copy used to stage several records at once"""
        other = Aggregator()
        other._stats = {contributor: stats.copy() for contributor, stats in self._stats.items()}
        other._total_value_received = self._total_value_received
        other._total_record_count = self._total_record_count
        other._total_gasless_count = self._total_gasless_count
        return other

    def stage(self, record: ContributionRecord) -> StagedUpdate:
        """
        Compute the statistics that would result from appending record.

        Raises:
            ArithmeticOverflow: If any accumulator would exceed MAX_AMOUNT
        """
        current = self._stats.get(record.contributor, ContributorStats())
        value = record.amount if record.is_value_bearing else 0
        gasless = 0 if record.is_value_bearing else 1

        contributor_stats = ContributorStats(
            total_value_received=_checked_add(current.total_value_received, value, 'total_value_received'),
            record_count=_checked_add(current.record_count, 1, 'record_count'),
            gasless_count=_checked_add(current.gasless_count, gasless, 'gasless_count'),
            last_activity_at=record.recorded_at
        )
        return StagedUpdate(
            contributor=record.contributor,
            contributor_stats=contributor_stats,
            total_value_received=_checked_add(self._total_value_received, value, 'global total_value_received'),
            total_record_count=_checked_add(self._total_record_count, 1, 'total_record_count'),
            total_gasless_count=_checked_add(self._total_gasless_count, gasless, 'total_gasless_count')
        )

    def apply(self, staged: StagedUpdate) -> None:
        """Commit a staged update"""
        self._stats[staged.contributor] = staged.contributor_stats
        self._total_value_received = staged.total_value_received
        self._total_record_count = staged.total_record_count
        self._total_gasless_count = staged.total_gasless_count

    def on_append(self, record: ContributionRecord) -> None:
        """Update statistics for a record that was just appended"""
        self.apply(self.stage(record))

    def stats_for(self, contributor: str) -> ContributorStats:
        """Statistics for contributor, zero-valued if it has no records"""
        stats = self._stats.get(contributor)
        if stats is None:
            return ContributorStats()
        return stats.copy()

    def global_stats(self) -> GlobalStats:
        return GlobalStats(
            total_value_received=self._total_value_received,
            total_record_count=self._total_record_count,
            total_gasless_count=self._total_gasless_count,
            known_contributors=tuple(self._stats)
        )

    def top_contributors(self, limit: int) -> List[Tuple[str, int]]:
        """
        First `limit` contributors with their total value received.

        Entries come back in first-seen order, NOT ranked by amount. A true
        ranking would need a sorted index; callers wanting the largest
        donors should request every contributor and sort the result.
        """
        if limit <= 0:
            return []
        result = []
        for contributor, stats in self._stats.items():
            if len(result) >= limit:
                break
            result.append((contributor, stats.total_value_received))
        return result
