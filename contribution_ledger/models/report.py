"""LedgerSummary model definition"""
from datetime import datetime
from typing import Dict, List, Optional, Any
from pydantic import BaseModel

class RecordView(BaseModel):
    """A ledger record together with its position"""
    index: int
    contributor: str
    amount: int
    recorded_at: datetime
    note: str
    is_value_bearing: bool

class ContributorView(BaseModel):
    contributor: str
    total_value_received: int

class LedgerSummary(BaseModel):
    """
    Snapshot of the ledger written by the summary command.

    Attributes:
        custodian: Identity currently allowed to withdraw and change policy
        minimum_contribution: Threshold for value-bearing contributions
        total_value_received: Sum of all value-bearing amounts
        total_record_count: Number of records in the ledger
        total_gasless_count: Number of zero-value records
        contributor_count: Number of distinct contributors
        top_contributors: First contributors in first-seen order, not ranked by amount
        latest_records: Most recent records, newest first
        metadata: Extra context about the report
    """
    custodian: str
    minimum_contribution: int
    total_value_received: int = 0
    total_record_count: int = 0
    total_gasless_count: int = 0
    contributor_count: int = 0
    top_contributors: List[ContributorView] = []
    latest_records: List[RecordView] = []
    metadata: Optional[Dict[str, Any]] = {}
