"""Shared test fixtures."""

import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

from app.client.backend import LocalJournalBackend
from app.config import Settings
from app.database import Base, make_engine, make_session_factory
from app.main import create_app
from app.services.identity import IdentityService
from app.services.journal.feed import LocalChangeFeed
from app.services.journal.records import TradeDraft
from app.services.journal.store import TradeStore
import app.models  # noqa: F401  registers tables on Base.metadata

APP_ID = "test-app"


def make_draft(**kwargs) -> TradeDraft:
    """Helper to create test drafts with sensible defaults."""
    defaults = {
        "date": "2024-01-05",
        "symbol": "EURUSD",
        "direction": "Short",
        "entry": "1.0950",
        "exit": "1.0900",
        "profit_loss": "-50",
        "rating": 3,
    }
    defaults.update(kwargs)
    return TradeDraft(**defaults)


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll until ``predicate()`` is true; fail the test on timeout."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached before timeout")
        await asyncio.sleep(0.01)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite://",
        redis_url="",
        app_id=APP_ID,
        app_env="development",
        api_key="",
    )


@pytest.fixture
async def session_factory(tmp_path):
    """Fresh SQLite database file for each test."""
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'journal.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield make_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def feed() -> LocalChangeFeed:
    return LocalChangeFeed()


@pytest.fixture
def store(session_factory, feed) -> TradeStore:
    return TradeStore(session_factory, feed, APP_ID)


@pytest.fixture
def identities(session_factory) -> IdentityService:
    return IdentityService(session_factory)


@pytest.fixture
def backend(identities, store) -> LocalJournalBackend:
    return LocalJournalBackend(identities, store)


@pytest.fixture
def api(settings, session_factory, feed):
    return create_app(settings, session_factory=session_factory, feed=feed)


@pytest.fixture
async def client(api):
    async with AsyncClient(transport=ASGITransport(app=api), base_url="http://test") as c:
        yield c
