"""Database storage service for ledger records and the access policy"""
import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from contribution_ledger.models.contribution import AccessPolicy, ContributionRecord
from contribution_ledger.models.db import AccessPolicyRow, ContributionRecordRow

logger = logging.getLogger(__name__)

POLICY_ROW_ID = 1

def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back; every stored timestamp is UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

class StorageService:
    """Handles all database operations"""

    def __init__(self, session: Session):
        if not session:
            raise ValueError("Database session is required")
        self.session = session

    def save_records(self, entries: Sequence[Tuple[int, ContributionRecord]]) -> None:
        """Store appended records in one transaction"""
        try:
            for index, record in entries:
                self.session.add(ContributionRecordRow(
                    index=index,
                    contributor=record.contributor,
                    amount=str(record.amount),
                    recorded_at=record.recorded_at,
                    note=record.note,
                    is_value_bearing=record.is_value_bearing
                ))
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Database error storing contribution records: {e}")
            raise

    def load_records(self) -> List[ContributionRecord]:
        """Load every stored record in ledger order"""
        try:
            rows = self.session.query(ContributionRecordRow).order_by(ContributionRecordRow.index).all()
        except SQLAlchemyError as e:
            logger.error(f"Database error loading contribution records: {e}")
            raise

        records = []
        for expected, row in enumerate(rows):
            if row.index != expected:
                raise ValueError(f"Stored ledger has a gap: expected index {expected}, found {row.index}")
            records.append(ContributionRecord(
                contributor=row.contributor,
                amount=int(row.amount),
                recorded_at=_as_utc(row.recorded_at),
                note=row.note,
                is_value_bearing=row.is_value_bearing
            ))
        return records

    def save_policy(self, policy: AccessPolicy) -> None:
        """Insert or replace the stored access policy"""
        try:
            row = self.session.get(AccessPolicyRow, POLICY_ROW_ID)
            if row:
                row.custodian = policy.custodian
                row.minimum_contribution = str(policy.minimum_contribution)
                row.updated_at = datetime.now(timezone.utc)
            else:
                self.session.add(AccessPolicyRow(
                    id=POLICY_ROW_ID,
                    custodian=policy.custodian,
                    minimum_contribution=str(policy.minimum_contribution),
                    updated_at=datetime.now(timezone.utc)
                ))
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Database error storing access policy: {e}")
            raise

    def load_policy(self) -> Optional[AccessPolicy]:
        try:
            row = self.session.get(AccessPolicyRow, POLICY_ROW_ID)
        except SQLAlchemyError as e:
            logger.error(f"Database error loading access policy: {e}")
            raise

        if row is None:
            return None
        return AccessPolicy(
            custodian=row.custodian,
            minimum_contribution=int(row.minimum_contribution)
        )
