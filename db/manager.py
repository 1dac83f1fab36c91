"""Database manager for the SQLite file backing the document store."""

import sqlite3
from contextlib import contextmanager
from config import Config, get_migrations_dir

# Seconds a connection waits on a locked database before giving up.
DEFAULT_TIMEOUT = 5.0


class DatabaseManager:
    """Opens connections to the document database and knows where it lives.

    Args:
        config: Application configuration object.
        timeout: Lock wait timeout handed to sqlite3.connect.
    """

    def __init__(self, config: Config, timeout: float = DEFAULT_TIMEOUT):
        self.config = config
        self.timeout = timeout

    @contextmanager
    def connect(self):
        """Open a connection to the document database, closing it afterwards.

        The parent directory is created on first use so a fresh install can
        run migrations straight away.

        Yields:
            sqlite3.Connection: Database connection.
        """
        db_path = self.config.db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(db_path, timeout=self.timeout)
        try:
            yield conn
        finally:
            conn.close()

    def get_db_path(self):
        """Return the database file path from the configuration."""
        return self.config.db_path

    def get_migrations_dir(self):
        """Return the directory holding the SQL migrations."""
        return get_migrations_dir()
