"""
Pytest configuration and shared fixtures for the advisory API tests.
"""

import os
from datetime import date
from unittest.mock import patch

import pytest

from advisory_api import create_app
from advisory_api.config import reset_global_settings
from advisory_api.database.base import create_tables, drop_tables, get_session, reset_engine
from advisory_api.models.errors import SimulationNotFoundError
from advisory_api.models.snapshot import (
    AssetSnapshot,
    InsurancePolicy,
    SimulationSnapshot,
    ValuationRecord,
)


@pytest.fixture(scope="function")
def test_env(tmp_path):
    """Point settings and the database at a throwaway SQLite file."""
    env = {
        "SECRET_KEY": "test-secret-key-123",
        "APP_ENV": "testing",
        "DB_URL": f"sqlite:///{tmp_path / 'advisory_test.db'}",
        "LOG_LEVEL": "WARNING",
    }
    with patch.dict(os.environ, env, clear=True):
        reset_global_settings()
        reset_engine()
        create_tables()
        yield env
        drop_tables()
        reset_engine()
        reset_global_settings()


@pytest.fixture(scope="function")
def db_session(test_env):
    """Create a database session for testing."""
    session = get_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def app(test_env):
    return create_app()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sample_snapshot():
    """Snapshot with one financial and one real-estate asset plus a policy."""
    return SimulationSnapshot(
        simulation_id=1,
        start_date=date(2025, 6, 1),
        real_rate=0.04,
        assets=[
            AssetSnapshot(
                id=1,
                name="Investimentos",
                category="FINANCEIRA",
                nominal_value=100000,
                valuation_history=[
                    ValuationRecord(date=date(2025, 5, 1), value=105000),
                ],
            ),
            AssetSnapshot(
                id=2,
                name="Apartamento",
                category="IMOBILIZADA",
                nominal_value=500000,
                valuation_history=[
                    ValuationRecord(date=date(2025, 4, 1), value=530000),
                ],
            ),
        ],
        insurances=[
            InsurancePolicy(
                id=1,
                name="Seguro de vida",
                insured_value=800000,
                start_date=date(2025, 1, 1),
                duration_months=240,
            ),
        ],
    )


class FakeSnapshotProvider:
    """In-memory snapshot provider that records every load."""

    def __init__(self, snapshots=None, movements=None):
        self.snapshots = snapshots or {}
        self.movements = movements or {}
        self.calls = []

    def load_snapshot(self, simulation_id):
        self.calls.append(("load_snapshot", simulation_id))
        if simulation_id not in self.snapshots:
            raise SimulationNotFoundError(simulation_id)
        return self.snapshots[simulation_id]

    def load_movements(self, simulation_id):
        self.calls.append(("load_movements", simulation_id))
        if simulation_id not in self.movements:
            raise SimulationNotFoundError(simulation_id)
        return list(self.movements[simulation_id])


@pytest.fixture
def make_provider():
    """Factory for in-memory snapshot providers."""
    return FakeSnapshotProvider


@pytest.fixture
def fake_provider(sample_snapshot):
    return FakeSnapshotProvider(snapshots={1: sample_snapshot}, movements={1: []})
