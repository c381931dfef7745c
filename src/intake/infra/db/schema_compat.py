"""Runtime DB compatibility helpers for legacy schemas.

Early deployments created ``users`` with only ``name`` and ``email``.
``SQLModel.metadata.create_all()`` never alters an existing table, so the
missing columns are backfilled here.
"""

from __future__ import annotations

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

_USERS_COLUMNS = {
    "phone": "VARCHAR(64)",
    "city": "VARCHAR(255)",
    "image_path": "VARCHAR(1024)",
    "pdf_path": "VARCHAR(1024)",
}


def ensure_schema_compat(engine: Engine) -> None:
    """Apply additive compatibility upgrades for existing databases."""
    with engine.begin() as conn:
        _ensure_users_columns(conn)


def _ensure_users_columns(conn: Connection) -> None:
    if not _table_exists(conn, "users"):
        return

    for column_name, ddl_type in _USERS_COLUMNS.items():
        if not _column_exists(conn, "users", column_name):
            conn.execute(
                text(f"ALTER TABLE users ADD COLUMN {column_name} {ddl_type} NOT NULL DEFAULT ''")
            )
            logger.info("Applied compatibility upgrade: added users.%s", column_name)


def _table_exists(conn: Connection, table_name: str) -> bool:
    return inspect(conn).has_table(table_name)


def _column_exists(conn: Connection, table_name: str, column_name: str) -> bool:
    return any(col["name"] == column_name for col in inspect(conn).get_columns(table_name))
