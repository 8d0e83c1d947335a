"""
Pytest configuration and fixtures for the Catalyst backend tests.
Every test gets a fresh in-memory SQLite database and a scripted LLM.
"""

import os

# Settings are read at import time; pin them before any project import.
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LLM_API_KEY", "test-key")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ai.enrichment import PitchEnricher
from ai.llm import LLMError, get_llm_client
from be.api import app
from be.db import get_session
from be.models import Base


class FakeLLM:
    """Stands in for the text-generation service.

    Replies are handed out in order; with none left (or ``error`` set) the
    call fails the way the real client does.
    """

    def __init__(self, replies=None, error=None):
        self.replies = list(replies or [])
        self.error = error
        self.calls = []

    async def complete(self, system, user, *, max_tokens=None):
        self.calls.append({"system": system, "user": user, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        if not self.replies:
            raise LLMError("no scripted reply")
        return self.replies.pop(0)


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def enricher(fake_llm):
    return PitchEnricher(fake_llm)


@pytest_asyncio.fixture
async def client(session_maker, fake_llm):
    """HTTP client against the app with DB and LLM dependencies overridden."""

    async def override_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_llm_client] = lambda: fake_llm

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
