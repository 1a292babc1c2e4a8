"""Shared pytest fixtures for all tests."""

import sqlite3
import pytest
from pathlib import Path

from config import Config, get_migrations_dir
from db.manager import apply_migrations
from services.base import Services


@pytest.fixture
def test_db():
    """Create an in-memory SQLite database for testing.

    Yields:
        sqlite3.Connection: Connection to in-memory database.
    """
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def test_config(tmp_path):
    """Create a test configuration pointing to a temporary directory.

    The LLM is disabled; tests that need it enable it explicitly.
    """
    return Config(
        base_dir=tmp_path / "spendwise",
        db_data_dir=tmp_path / "spendwise" / "db",
        db_filename="test.db",
        log_level="DEBUG",
        log_dir=tmp_path / "spendwise" / "logs",
        llm_enabled=False,
        llm_provider="openai",
        llm_openai_api_key="",
        llm_openai_model="gpt-4o-mini",
        llm_max_workers=2,
    )


@pytest.fixture
def llm_config(test_config):
    """Test configuration with the OpenAI provider enabled."""
    test_config.llm_enabled = True
    test_config.llm_openai_api_key = "sk-test"
    return test_config


@pytest.fixture
def db_manager_with_schema(test_db):
    """Create a DatabaseManager backed by an in-memory database with migrations applied."""
    apply_migrations(test_db, get_migrations_dir())

    class TestDatabaseManager:
        """Test database manager that uses in-memory connection."""

        def __init__(self, conn):
            self.conn = conn

        def connect(self):
            return _TestConnectionContext(self.conn)

        def get_db_path(self):
            return Path(":memory:")

        def get_migrations_dir(self):
            return get_migrations_dir()

    class _TestConnectionContext:
        """Context manager that leaves the shared connection open."""

        def __init__(self, conn):
            self.conn = conn

        def __enter__(self):
            return self.conn

        def __exit__(self, exc_type, exc_val, exc_tb):
            pass

    return TestDatabaseManager(test_db)


@pytest.fixture
def services(test_config, db_manager_with_schema):
    """Create a Services container with a clean test database."""
    return Services(test_config, db_manager=db_manager_with_schema)
