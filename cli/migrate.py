#!/usr/bin/env python3

from logger import get_logger

logger = get_logger()


def init_schema_migrations_table(conn):
    conn.execute("""
        CREATE TABLE IF NOT EXISTS schema_migrations (
            migration_file TEXT PRIMARY KEY,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)
    conn.commit()


def get_applied_migrations(conn):
    cursor = conn.execute("SELECT migration_file FROM schema_migrations")
    return {row[0] for row in cursor.fetchall()}


def get_pending_migrations(conn, db_manager):
    """Migration file names not yet applied, in filename order."""
    migrations_dir = db_manager.get_migrations_dir()
    if not migrations_dir.exists():
        return []

    applied = get_applied_migrations(conn)
    return sorted(
        path.name for path in migrations_dir.glob("*.sql") if path.name not in applied
    )


def apply_migration(conn, migration_file, db_manager):
    sql = (db_manager.get_migrations_dir() / migration_file).read_text()

    try:
        conn.executescript(sql)
        conn.execute(
            "INSERT INTO schema_migrations (migration_file) VALUES (?)",
            (migration_file,),
        )
        conn.commit()
        logger.info(f"Applied migration: {migration_file}")
    except Exception as e:
        conn.rollback()
        logger.error(f"Error applying migration {migration_file}: {e}")
        raise


def cmd_status(args, db_manager):
    """Show migration status."""
    if not db_manager.get_db_path().exists():
        logger.info(
            "Database does not exist. Run 'python -m cli migrate apply' to create it."
        )
        return

    with db_manager.connect() as conn:
        init_schema_migrations_table(conn)
        applied = sorted(get_applied_migrations(conn))
        pending = get_pending_migrations(conn, db_manager)

    for migration in applied:
        logger.info(f"{migration}: APPLIED")
    for migration in pending:
        logger.info(f"{migration}: PENDING")
    logger.info(f"\nApplied: {len(applied)}  Pending: {len(pending)}")


def cmd_apply(args, db_manager):
    """Apply pending migrations."""
    with db_manager.connect() as conn:
        init_schema_migrations_table(conn)
        pending = get_pending_migrations(conn, db_manager)

        if not pending:
            logger.info("No pending migrations.")
            return

        if getattr(args, "dry_run", False):
            for migration in pending:
                logger.info(f"Would apply: {migration}")
            return

        for migration in pending:
            apply_migration(conn, migration, db_manager)

        logger.info(f"Successfully applied {len(pending)} migration(s).")


def setup_parser(subparsers):
    """Setup migrate subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "migrate",
        help="Database migrations",
        description="Manage the document database schema",
    )

    migrate_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available migration commands",
        dest="subcommand",
        required=True,
    )

    status_parser = migrate_subparsers.add_parser(
        "status", help="Show migration status"
    )
    status_parser.set_defaults(func=cmd_status)

    apply_parser = migrate_subparsers.add_parser(
        "apply", help="Apply pending migrations"
    )
    apply_parser.add_argument(
        "--dry-run", action="store_true", help="List pending migrations without applying"
    )
    apply_parser.set_defaults(func=cmd_apply)
