"""Event models emitted once per state-changing operation"""
from datetime import datetime
from typing import Literal
from pydantic import BaseModel


class LedgerEvent(BaseModel):
    """Common fields for every emitted event"""
    occurred_at: datetime


class ContributionRecorded(LedgerEvent):
    """
    A record was appended to the ledger.

    Attributes:
        index: Position of the new record in the ledger
        contributor: Identity the record is attributed to
        amount: Value carried by the record, 0 for gasless
        note: Free text supplied by the contributor
        is_value_bearing: False for gasless contributions
    """
    kind: Literal['contribution_recorded'] = 'contribution_recorded'
    index: int
    contributor: str
    amount: int
    note: str
    is_value_bearing: bool


class CustodianChanged(LedgerEvent):
    kind: Literal['custodian_changed'] = 'custodian_changed'
    previous_custodian: str
    new_custodian: str


class MinimumContributionUpdated(LedgerEvent):
    kind: Literal['minimum_contribution_updated'] = 'minimum_contribution_updated'
    changed_by: str
    previous_minimum: int
    new_minimum: int


class FundsWithdrawn(LedgerEvent):
    kind: Literal['funds_withdrawn'] = 'funds_withdrawn'
    custodian: str
    amount: int

