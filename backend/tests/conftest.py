import os
import sys
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from flowquest import clock
from flowquest.config import Settings
from flowquest.main import create_app


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        DB_INIT_ON_STARTUP=True,
        ANTHROPIC_API_KEY="",
        LOG_LEVEL="WARNING",
        _env_file=None,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """TestClient bound to a fresh in-memory store; the lifespan runs on enter."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def store(client):
    return client.app.state.store


class Ticker:
    """Stand-in for clock.utcnow that advances one second per call."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def ticking_clock(monkeypatch):
    ticker = Ticker(datetime(2024, 5, 1, 12, 0, 0))
    monkeypatch.setattr(clock, "utcnow", ticker)
    return ticker
