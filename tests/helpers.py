"""Helper utilities for tests."""

from pathlib import Path
import sqlite3

from config import get_migrations_dir


class _TestConnectionContext:
    """Context manager for test database connections."""

    def __init__(self, conn):
        self.conn = conn

    def __enter__(self):
        return self.conn

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Don't close the connection - let the fixture handle it
        pass


class TestDatabaseManager:
    """Test database manager that uses a shared in-memory connection."""

    __test__ = False

    def __init__(self, conn):
        self.conn = conn

    def connect(self):
        return _TestConnectionContext(self.conn)

    def get_db_path(self):
        return Path(":memory:")

    def get_migrations_dir(self):
        return get_migrations_dir()


def run_migrations(conn: sqlite3.Connection, migrations_dir: Path) -> None:
    """Run all SQL migrations in order.

    Args:
        conn: SQLite connection to run migrations against.
        migrations_dir: Path to directory containing .sql migration files.
    """
    for migration_file in sorted(migrations_dir.glob("*.sql")):
        conn.executescript(migration_file.read_text())

    conn.commit()


def add_category(services, owner, name, **fields):
    """Insert a category document directly, bypassing the service guards."""
    data = {
        "owner": owner,
        "name": name,
        "kind": "custom",
        "pinned": False,
        "order": 99,
        "active": True,
    }
    data.update(fields)
    return services.store.create("categories", data)["id"]


def add_subcategory(services, category_id, name, **fields):
    """Insert a subcategory document directly, bypassing the service guards.

    The owner is taken from the parent category when it exists.
    """
    parent = services.store.get("categories", category_id)
    data = {
        "category_id": category_id,
        "owner": parent["owner"] if parent else None,
        "name": name,
        "pinned": False,
        "order": 99,
        "active": True,
    }
    data.update(fields)
    return services.store.create("subcategories", data)["id"]


def add_task(services, owner, title, category_id, subcategory_id=None, **fields):
    """Insert a task document directly."""
    data = {
        "owner": owner,
        "title": title,
        "category_id": category_id,
        "subcategory_id": subcategory_id,
    }
    data.update(fields)
    return services.store.create("tasks", data)["id"]
