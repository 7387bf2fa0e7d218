"""Pytest configuration and fixtures."""

import pytest

from app.queries.schedule_events import ScheduleEventQueries
from shared.framework.metrics import MetricsCollector
from tests.fixtures.mock_services import FakePostgresClient
from tests.fixtures.sample_events import seed_schedule


@pytest.fixture
def fake_postgres():
    """Seeded in-memory schedule store."""
    return seed_schedule(FakePostgresClient())


@pytest.fixture
def metrics():
    """Metrics collector with its own registry."""
    return MetricsCollector("schedule-test")


@pytest.fixture
def queries(fake_postgres, metrics):
    """Projection queries over the seeded store."""
    return ScheduleEventQueries(fake_postgres, timeout=1.0, metrics=metrics)


@pytest.fixture
def schedule_env(monkeypatch):
    """Minimal environment for building service configuration."""
    monkeypatch.setenv("SCHEDULE_ENV", "local")
    monkeypatch.setenv("SCHEDULE_POSTGRES_DSN", "postgresql://svc:secret@db:5432/schedule")
    monkeypatch.setenv("SCHEDULE_QUERY_TIMEOUT", "2")
    monkeypatch.setenv("SCHEDULE_LOG_FORMAT", "console")
