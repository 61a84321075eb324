"""Domain models for the contribution ledger"""
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Tuple

# Upper bound of the value-transfer system (uint256)
MAX_AMOUNT = 2 ** 256 - 1

@dataclass(frozen=True)
class ContributionRecord:
    """Single ledger entry, immutable once appended"""
    contributor: str
    amount: int
    recorded_at: datetime
    note: str
    is_value_bearing: bool

@dataclass
class ContributorStats:
    """Running statistics for one contributor"""
    total_value_received: int = 0
    record_count: int = 0
    gasless_count: int = 0
    last_activity_at: Optional[datetime] = None

    def copy(self) -> 'ContributorStats':
        return replace(self)

@dataclass(frozen=True)
class GlobalStats:
    """Running statistics across all contributors"""
    total_value_received: int = 0
    total_record_count: int = 0
    total_gasless_count: int = 0
    known_contributors: Tuple[str, ...] = ()

@dataclass
class AccessPolicy:
    """Custodian identity and intake threshold"""
    custodian: str
    minimum_contribution: int = 0
