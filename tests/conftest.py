import os

os.environ.setdefault("NOTIFY_ENV", "test")

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from notification_prefs.api.server import create_app
from notification_prefs.config import Settings
from notification_prefs.engine.decision import NotificationGate
from notification_prefs.engine.store import InMemoryStore


def utc(hour, minute, second=0, day=28):
    return datetime(2025, 7, day, hour, minute, second, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def gate(store):
    return NotificationGate(store)


@pytest.fixture
def settings():
    return Settings(ENV="test")


@pytest.fixture
def client(settings, store):
    app = create_app(settings, store=store)
    with TestClient(app) as c:
        yield c
