"""
Pytest configuration and fixtures.
"""

import os
import sys
import datetime
from pathlib import Path
import httpx
import pytest
import pytest_asyncio

# Add project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from timekeeper.infra.db import DatabaseEngine
from timekeeper.infra.local_store import LocalStore
from timekeeper.infra.remote_store import RemoteStore

REMOTE_BASE_URL = "https://test.supabase.co/rest/v1"


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Create a throwaway SQLite database for testing"""
    engine = DatabaseEngine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await engine.create_tables()
    yield engine
    await engine.dispose()


@pytest.fixture
def local_store(db_engine):
    return LocalStore(db_engine)


@pytest_asyncio.fixture
async def make_remote():
    """
    Build a RemoteStore whose HTTP calls go to `handler(request)`.

    The handler returns an httpx.Response or raises to simulate a
    transport failure.
    """
    clients = []

    def factory(handler):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=REMOTE_BASE_URL)
        clients.append(client)
        return RemoteStore(client)

    yield factory

    for client in clients:
        await client.aclose()


class FakeClock:
    """Clock that only moves when told to"""

    def __init__(self, start: datetime.datetime):
        self.now = start

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, seconds: int):
        self.now += datetime.timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock(datetime.datetime(2026, 10, 19, 12, 0, tzinfo=datetime.timezone.utc))


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep real env vars, .env and settings.yaml out of the tests"""
    for name in list(os.environ):
        if name.startswith("TIMETRACKER_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
