"""SQLAlchemy database models for the durable ledger state"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()

class ContributionRecordRow(Base):
    """
    One appended contribution record.
    The ledger index is the primary key, so rows replay in append order.
    Amounts are stored as decimal strings because they can exceed 64 bits.
    """
    __tablename__ = 'contribution_records'

    index = Column(Integer, primary_key=True, autoincrement=False)
    contributor = Column(String, nullable=False, index=True)
    amount = Column(String, nullable=False)
    recorded_at = Column(DateTime(timezone=True), nullable=False)
    note = Column(Text, nullable=False, default='')
    is_value_bearing = Column(Boolean, nullable=False)

class AccessPolicyRow(Base):
    """Single-row table holding the current access policy"""
    __tablename__ = 'access_policy'

    id = Column(Integer, primary_key=True)
    custodian = Column(String, nullable=False)
    minimum_contribution = Column(String, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)
