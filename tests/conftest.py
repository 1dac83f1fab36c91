"""Shared pytest fixtures for all tests."""

import sqlite3
import pytest
from pathlib import Path

from catalog import SystemCatalog, load_catalog
from config import Config, get_migrations_dir
from services.base import Services
from tests.helpers import TestDatabaseManager, run_migrations


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

    Args:
        tmp_path: pytest tmp_path fixture for temporary directory.

    Returns:
        Config: Test configuration object.
    """
    return Config(
        base_dir=tmp_path / "zentask",
        db_data_dir=tmp_path / "zentask" / "db",
        db_filename="test.db",
        log_level="DEBUG",
        log_dir=tmp_path / "zentask" / "logs",
    )


@pytest.fixture
def db_manager_with_schema(test_db):
    """Create a database manager over an in-memory database with migrations applied.

    Args:
        test_db: In-memory database connection fixture.

    Returns:
        TestDatabaseManager: Database manager with schema ready.
    """
    run_migrations(test_db, get_migrations_dir())
    return TestDatabaseManager(test_db)


@pytest.fixture
def catalog():
    """The bundled system catalog."""
    return load_catalog()


@pytest.fixture
def small_catalog():
    """A two-category catalog for focused seeding tests."""
    return SystemCatalog.from_dict(
        {
            "version": "test-1",
            "fallback_category": "Pessoal",
            "categories": [
                {"name": "Financeiro", "icon": "💰", "color": "bg-emerald-600",
                 "subcategories": ["Contas a pagar", "Investimentos"]},
                {"name": "Pessoal", "icon": "👤", "color": "bg-green-500",
                 "subcategories": ["Casa", "Lazer", "Família"]},
            ],
        }
    )


@pytest.fixture
def services(test_config, db_manager_with_schema, catalog):
    """Create a Services container with a test database and the bundled catalog.

    Returns:
        Services: Services container for testing.
    """
    return Services(test_config, db_manager=db_manager_with_schema, catalog=catalog)


@pytest.fixture
def small_services(test_config, db_manager_with_schema, small_catalog):
    """Services container seeded from the two-category test catalog."""
    return Services(
        test_config, db_manager=db_manager_with_schema, catalog=small_catalog
    )


@pytest.fixture
def owner():
    return "user-1"
