"""Shared fixtures: in-memory SQLite database and a fixed clock."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from vault_sync.storage.sqlalchemy import SQLAlchemyDatabase

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)


@pytest.fixture
def database():
    """Fresh SQLAlchemy database handle over in-memory SQLite."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    db = SQLAlchemyDatabase(engine)
    db.create_tables()
    return db


@pytest.fixture
def fixed_clock():
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW
