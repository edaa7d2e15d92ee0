"""Helper utilities for tests."""

from pathlib import Path
import sqlite3

from models.category import Category


def run_migrations(conn: sqlite3.Connection, migrations_dir: Path) -> None:
    """Run all SQL migrations in order.

    Args:
        conn: SQLite connection to run migrations against.
        migrations_dir: Path to directory containing .sql migration files.
    """
    for migration_file in sorted(migrations_dir.glob("*.sql")):
        conn.executescript(migration_file.read_text(encoding="utf-8"))

    conn.commit()


def make_category(id, name, parent=None, sort_order=0, is_active=True, description=None):
    """Build an in-memory Category for hierarchy tests."""
    return Category(
        id=id,
        name=name,
        description=description,
        parent_category_id=parent,
        sort_order=sort_order,
        is_active=is_active,
    )
