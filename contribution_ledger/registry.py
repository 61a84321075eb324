"""Contribution intake and queries over the ledger"""
import logging
import threading
from typing import List, Optional, Sequence, Tuple

from contribution_ledger.access import AccessController, require_amount, require_identity
from contribution_ledger.aggregator import Aggregator
from contribution_ledger.config import LedgerLimits
from contribution_ledger.errors import BelowMinimum, InputTooLarge
from contribution_ledger.ledger import LedgerStore
from contribution_ledger.models.contribution import (
    AccessPolicy,
    ContributionRecord,
    ContributorStats,
    GlobalStats,
)
from contribution_ledger.models.events import ContributionRecorded
from contribution_ledger.services.clock import Clock, SystemClock
from contribution_ledger.services.events import EventSink, LoggingEventSink, publish
from contribution_ledger.services.storage import StorageService
from contribution_ledger.services.vault import Vault

logger = logging.getLogger(__name__)

class ContributionRegistry:
    """
    Composes the ledger store, aggregator and access controller.

    Every append goes through _commit(), which writes the record and the
    statistics derived from it as a single step under one lock. Readers
    take the same lock, so a half-applied append is never visible.
    """

    def __init__(self, policy: AccessPolicy, vault: Vault,
                 clock: Optional[Clock] = None,
                 events: Optional[EventSink] = None,
                 limits: Optional[LedgerLimits] = None,
                 storage: Optional[StorageService] = None):
        self.clock = clock or SystemClock()
        self.events = events or LoggingEventSink()
        self.limits = limits or LedgerLimits()
        self.storage = storage
        self.access = AccessController(policy, vault, self.clock, self.events, storage)
        self._ledger = LedgerStore()
        self._aggregator = Aggregator()
        self._lock = threading.RLock()

    @classmethod
    def restore(cls, storage: StorageService, vault: Vault,
                default_policy: AccessPolicy,
                clock: Optional[Clock] = None,
                events: Optional[EventSink] = None,
                limits: Optional[LedgerLimits] = None) -> 'ContributionRegistry':
        """
        Rebuild a registry from durable state.

        Records are replayed through a fresh aggregator; the stored policy
        wins over default_policy, which is saved when none is stored yet.
        """
        policy = storage.load_policy()
        if policy is None:
            policy = default_policy
            storage.save_policy(policy)

        registry = cls(policy, vault, clock=clock, events=events, limits=limits, storage=storage)
        records = storage.load_records()
        for record in records:
            registry._ledger.append_record(record)
            registry._aggregator.on_append(record)
        logger.info(f"Restored {len(records)} records for {len(registry._ledger.known_contributors())} contributors")
        return registry

    # Intake

    def submit_value_contribution(self, caller: str, amount: int, note: str = '') -> int:
        """
        Record a value-bearing contribution. Open to any caller.

        The value itself must already be in the vault's custody; this
        method never debits the caller.

        Returns:
            int: Index of the new record

        Raises:
            BelowMinimum: If amount is under the policy minimum
            InputTooLarge: If note exceeds the configured length
        """
        require_identity(caller)
        require_amount(amount)
        self._check_note(note)
        with self._lock:
            minimum = self.access.policy.minimum_contribution
            if amount < minimum:
                logger.info(f"Rejected contribution of {amount} from {caller}: minimum is {minimum}")
                raise BelowMinimum(amount, minimum)
            return self._commit(caller, [(amount, note, True)])[0]

    def submit_gasless_contribution(self, caller: str, note: str = '') -> int:
        """Record a zero-value contribution and return its index"""
        return self.submit_gasless_batch(caller, [note])[0]

    def submit_gasless_batch(self, caller: str, notes: Sequence[str]) -> List[int]:
        """
        Record one zero-value contribution per note, all attributed to caller.

        Either every note is recorded, with consecutive indices, or none is.

        Raises:
            InputTooLarge: If there are too many notes or any note is too long
        """
        require_identity(caller)
        notes = list(notes)
        if len(notes) > self.limits.max_batch_size:
            raise InputTooLarge(f"Batch of {len(notes)} notes exceeds the limit of {self.limits.max_batch_size}")
        for note in notes:
            self._check_note(note)
        with self._lock:
            return self._commit(caller, [(0, note, False) for note in notes])

    def _check_note(self, note: str) -> None:
        if not isinstance(note, str):
            raise ValueError(f"note must be a string, got {type(note).__name__}")
        if len(note) > self.limits.max_note_length:
            raise InputTooLarge(f"Note of {len(note)} characters exceeds the limit of {self.limits.max_note_length}")

    def _commit(self, contributor: str, entries: List[Tuple[int, str, bool]]) -> List[int]:
        """
        Append records and update statistics as one transaction.

        All statistics are staged against a scratch aggregator first and the
        records are persisted before any live state changes, so an overflow
        or a storage failure leaves the ledger exactly as it was.
        """
        with self._lock:
            start = self._ledger.count()
            records = []
            staged = []
            # later records in a batch must stage on top of earlier ones
            scratch = self._aggregator.clone() if len(entries) > 1 else self._aggregator
            for amount, note, is_value_bearing in entries:
                record = ContributionRecord(
                    contributor=contributor,
                    amount=amount,
                    recorded_at=self.clock.now(),
                    note=note,
                    is_value_bearing=is_value_bearing
                )
                update = scratch.stage(record)
                if scratch is not self._aggregator:
                    scratch.apply(update)
                records.append(record)
                staged.append(update)

            if self.storage is not None:
                self.storage.save_records([(start + offset, record) for offset, record in enumerate(records)])

            indices = []
            for record, update in zip(records, staged):
                indices.append(self._ledger.append_record(record))
                self._aggregator.apply(update)

            for index, record in zip(indices, records):
                kind = f"value {record.amount}" if record.is_value_bearing else "gasless"
                logger.info(f"Recorded contribution {index} from {record.contributor} ({kind})")
                publish(self.events, ContributionRecorded(
                    occurred_at=record.recorded_at,
                    index=index,
                    contributor=record.contributor,
                    amount=record.amount,
                    note=record.note,
                    is_value_bearing=record.is_value_bearing
                ))
            return indices

    # Privileged operations

    def withdraw(self, caller: str, amount: int) -> None:
        with self._lock:
            self.access.withdraw(caller, amount)

    def set_minimum_contribution(self, caller: str, value: int) -> None:
        with self._lock:
            self.access.set_minimum_contribution(caller, value)

    def set_custodian(self, caller: str, new_custodian: str) -> None:
        with self._lock:
            self.access.set_custodian(caller, new_custodian)

    # Queries

    def get_record(self, index: int) -> ContributionRecord:
        with self._lock:
            return self._ledger.get(index)

    def record_count(self) -> int:
        with self._lock:
            return self._ledger.count()

    def latest(self, n: int) -> List[ContributionRecord]:
        with self._lock:
            return self._ledger.latest(n)

    def indices_by_contributor(self, contributor: str) -> List[int]:
        with self._lock:
            return self._ledger.indices_by_contributor(contributor)

    def records_by_contributor(self, contributor: str) -> List[ContributionRecord]:
        with self._lock:
            return [self._ledger.get(i) for i in self._ledger.indices_by_contributor(contributor)]

    def records(self) -> List[ContributionRecord]:
        with self._lock:
            return self._ledger.records()

    def known_contributors(self) -> Tuple[str, ...]:
        with self._lock:
            return self._ledger.known_contributors()

    def stats_for(self, contributor: str) -> ContributorStats:
        with self._lock:
            return self._aggregator.stats_for(contributor)

    def global_stats(self) -> GlobalStats:
        with self._lock:
            return self._aggregator.global_stats()

    def top_contributors(self, limit: int) -> List[Tuple[str, int]]:
        """First `limit` contributors in first-seen order, not ranked by amount"""
        with self._lock:
            return self._aggregator.top_contributors(limit)

    @property
    def policy(self) -> AccessPolicy:
        with self._lock:
            return self.access.policy

    def balance(self) -> int:
        return self.access.vault.current_balance()

    def rebuild_stats(self) -> Aggregator:
        """Replay the full record sequence through a fresh aggregator"""
        with self._lock:
            return Aggregator.replay(self._ledger.records())
