"""Append-only store of contribution records"""
import logging
from datetime import datetime
from typing import Dict, List, Tuple

from contribution_ledger.errors import IndexOutOfRange
from contribution_ledger.models.contribution import ContributionRecord

logger = logging.getLogger(__name__)

class LedgerStore:
    """
    Strictly ordered sequence of contribution records.

    Records are identified by their 0-based position and are never mutated
    or removed. The store also tracks every contributor it has seen, in
    first-seen order.
    """

    def __init__(self):
        self._records: List[ContributionRecord] = []
        self._indices_by_contributor: Dict[str, List[int]] = {}

    def append(self, contributor: str, amount: int, note: str,
               is_value_bearing: bool, recorded_at: datetime) -> int:
        """
        Append a record and return its index.

        Returns:
            int: Position of the new record in the ledger
        """
        return self.append_record(ContributionRecord(
            contributor=contributor,
            amount=amount,
            recorded_at=recorded_at,
            note=note,
            is_value_bearing=is_value_bearing
        ))

    def append_record(self, record: ContributionRecord) -> int:
        """Append an already built record and return its index"""
        index = len(self._records)
        self._records.append(record)
        # dict insertion order doubles as first-seen order
        self._indices_by_contributor.setdefault(record.contributor, []).append(index)
        logger.debug(f"Appended record {index} for {record.contributor}")
        return index

    def get(self, index: int) -> ContributionRecord:
        """
        Get the record at a position.

        Raises:
            IndexOutOfRange: If no record exists at index
        """
        if index < 0 or index >= len(self._records):
            raise IndexOutOfRange(index, len(self._records))
        return self._records[index]

    def count(self) -> int:
        return len(self._records)

    def latest(self, n: int) -> List[ContributionRecord]:
        """Up to n most recent records, most recent first"""
        if n <= 0:
            return []
        return self._records[-n:][::-1]

    def indices_by_contributor(self, contributor: str) -> List[int]:
        """All indices attributed to contributor, in append order"""
        return list(self._indices_by_contributor.get(contributor, []))

    def known_contributors(self) -> Tuple[str, ...]:
        return tuple(self._indices_by_contributor)

    def records(self) -> List[ContributionRecord]:
        """Copy of the full record sequence, in append order"""
        return list(self._records)
