"""
Pytest configuration and fixtures for contribution ledger tests.
"""

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import HealthCheck, settings
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from contribution_ledger.config import LedgerLimits
from contribution_ledger.models.contribution import AccessPolicy
from contribution_ledger.models.db import Base
from contribution_ledger.registry import ContributionRegistry
from contribution_ledger.services.clock import ManualClock
from contribution_ledger.services.events import MemoryEventSink
from contribution_ledger.services.storage import StorageService
from contribution_ledger.services.vault import InMemoryVault

# Wall-clock health checks are flaky on cold or loaded machines.
settings.register_profile("ci", suppress_health_check=[HealthCheck.too_slow], deadline=None)
settings.load_profile("ci")

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    """Clock that ticks one second per reading."""
    return ManualClock(start=START, step=timedelta(seconds=1))


@pytest.fixture
def sink():
    return MemoryEventSink()


@pytest.fixture
def vault():
    return InMemoryVault()


@pytest.fixture
def limits():
    return LedgerLimits(max_note_length=64, max_batch_size=5)


@pytest.fixture
def registry(vault, clock, sink, limits):
    """Registry with custodian A and a minimum contribution of 100."""
    return ContributionRegistry(
        AccessPolicy(custodian="A", minimum_contribution=100),
        vault,
        clock=clock,
        events=sink,
        limits=limits
    )


@pytest.fixture
def session():
    """Session bound to a fresh in-memory SQLite database."""
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def storage(session):
    return StorageService(session)
