"""Opening SQLite connections for the parcel store."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from parcel_tracker.config.settings import MEMORY_DB, settings
from parcel_tracker.repositories.errors import StorageError
from parcel_tracker.repositories.sqlite.parcels_sqlite import ParcelStoreSqlite

logger = logging.getLogger(__name__)


def open_connection(
    path: str | Path | None = None, *, timeout: float | None = None
) -> sqlite3.Connection:
    """Open a connection to the parcel database.

    ``path`` and ``timeout`` default to ``PARCEL_DB_PATH`` and
    ``PARCEL_DB_TIMEOUT``. Parent directories of file databases are created.
    """
    if path is None:
        db_path, in_memory = settings.db_path, settings.in_memory
    else:
        db_path = str(path)
        in_memory = db_path == MEMORY_DB
    busy_timeout = timeout if timeout is not None else settings.db_timeout

    if not in_memory:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    try:
        conn = sqlite3.connect(db_path, timeout=busy_timeout)
    except sqlite3.Error as exc:
        raise StorageError(f"Cannot open database {db_path}: {exc}", "connect") from exc
    logger.debug("Opened parcel database", extra={"db_path": db_path, "timeout": busy_timeout})
    return conn


def ensure_schema(conn: sqlite3.Connection) -> None:
    # Programmatic schema init via the store so it always matches code
    ParcelStoreSqlite(conn)
