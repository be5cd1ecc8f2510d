from datetime import datetime, timedelta, timezone

import pytest

from log_service.api import create_app
from log_service.config import ServiceConfig
from log_service.models import LogRecord, PARTITION_KEY
from log_service.store import InMemoryLogStore
from log_service.validator import IngestValidator


class FakeClock:
    """Settable clock for time-dependent behavior."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


def make_record(index, severity="info", base=None, message=None):
    """Record whose timestamp is *index* seconds after *base*."""
    base = base or datetime(2024, 1, 15, 0, 0, 0, tzinfo=timezone.utc)
    ts = base + timedelta(seconds=index)
    return LogRecord(
        log_partition=PARTITION_KEY,
        date_time=ts.strftime("%Y-%m-%dT%H:%M:%S.000Z"),
        id=f"id-{index:04d}",
        severity=severity,
        message=message or f"message {index}",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service_config():
    return ServiceConfig(table_name="test_logs", store_backend="memory")


@pytest.fixture
def store():
    return InMemoryLogStore(name="test_logs")


@pytest.fixture
def validator():
    return IngestValidator(max_message_length=50)


@pytest.fixture
def app(service_config, store):
    """Create a Flask test app backed by an in-memory store."""
    application = create_app(service_config, store=store)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    return app.test_client()
