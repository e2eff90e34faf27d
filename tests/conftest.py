"""
Shared pytest configuration for the Wall test suite.

This file centralizes reusable testing utilities so that:
    • unit tests use deterministic fake backends
    • CLI tests share one CliRunner and a clean environment
    • async code is driven with asyncio.run, no plugin required
"""

import logging
from datetime import datetime, timezone

import pytest
from typer.testing import CliRunner

from tests.fixtures.fake_backend import FakeBackend
from tests.fixtures.fake_supabase_sdk import FakeAsyncSupabase
from wall.repository import PostRepository
from wall.supabase_client import SupabaseBackend

CONFIG_ENV_VARS = (
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_KEY",
    "NEXT_PUBLIC_SUPABASE_URL",
    "NEXT_PUBLIC_SUPABASE_ANON_KEY",
    "WALL_FALLBACK_POLICY",
    "WALL_BUCKET",
    "WALL_TABLE",
)


# ============================================================================
# SHARED TEST INFRASTRUCTURE
# ============================================================================


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provides a fresh Typer CliRunner instance for CLI tests."""
    return CliRunner()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every Wall/Supabase configuration variable from the environment."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 1, 2, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# DETERMINISTIC BACKENDS
# ============================================================================


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def repository(fake_backend) -> PostRepository:
    return PostRepository(fake_backend)


@pytest.fixture
def fake_sdk() -> FakeAsyncSupabase:
    return FakeAsyncSupabase()


@pytest.fixture
def supabase_backend(fake_sdk) -> SupabaseBackend:
    """The real adapter, driving the in‑memory SDK double."""
    return SupabaseBackend(fake_sdk)


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """
    CLI commands reconfigure the root logger (and may bind a handler to the
    CliRunner's temporary stderr). Put it back afterwards.
    """
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
