"""Pytest configuration and shared fixtures."""

import pytest

from src.core import db_client
from src.core.config import settings


@pytest.fixture
async def db(tmp_path, monkeypatch):
    """Fresh SQLite database with the full schema, closed after the test."""
    monkeypatch.setattr(settings, "sqlite_db_path", str(tmp_path / "binday_test.db"))
    await db_client.init_db()
    yield
    await db_client.close_connection()
