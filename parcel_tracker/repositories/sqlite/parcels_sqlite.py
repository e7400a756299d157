from __future__ import annotations

import contextlib
import logging
import sqlite3
from enum import Enum
from typing import Any, Sequence

from ...domain.value_objects.enums import ParcelStatus
from ...domain.value_objects.ids import ClientId, ParcelNumber
from ..errors import ParcelNotFoundError, StorageError
from ..parcels import Parcel, ParcelStore

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS parcel (
    number INTEGER PRIMARY KEY AUTOINCREMENT,
    client INTEGER,
    status TEXT,
    address TEXT,
    created_at TEXT
);
CREATE INDEX IF NOT EXISTS parcel_client_idx ON parcel (client);
"""

_COLUMNS = "number, client, status, address, created_at"


def _plain(value: Any) -> Any:
    # Enum members are written as their raw value
    if isinstance(value, Enum):
        return value.value
    return value


class ParcelStoreSqlite(ParcelStore):
    """SQLite implementation of :class:`ParcelStore`.

    Every call runs a single statement and commits writes immediately; the
    store keeps no state besides the connection.

    Example:
        >>> import sqlite3
        >>> conn = sqlite3.connect(":memory:")
        >>> store = ParcelStoreSqlite(conn)
        >>> number = store.add(Parcel(None, 42, "registered", "A St", "2024-01-01T00:00:00Z"))
        >>> store.get(number)
        Parcel(number=1, client=42, status='registered', address='A St', created_at='2024-01-01T00:00:00Z')
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        try:
            self._conn.executescript(SCHEMA)
            self._conn.commit()
        except sqlite3.Error as exc:
            logger.error("Schema creation failed", extra={"error": str(exc)})
            raise StorageError(f"Cannot create parcel schema: {exc}", "schema") from exc

    def _execute(self, operation: str, sql: str, params: Sequence[Any]) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, tuple(_plain(p) for p in params))
        except sqlite3.Error as exc:
            logger.error(
                "Parcel store %s failed", operation, extra={"operation": operation, "error": str(exc)}
            )
            raise StorageError(f"SQLite {operation} failed: {exc}", operation) from exc

    def _write(self, operation: str, sql: str, params: Sequence[Any]) -> sqlite3.Cursor:
        try:
            cur = self._conn.execute(sql, tuple(_plain(p) for p in params))
            self._conn.commit()
        except sqlite3.Error as exc:
            # A failed write must leave nothing pending for the next commit
            with contextlib.suppress(sqlite3.Error):
                self._conn.rollback()
            logger.error(
                "Parcel store %s failed", operation, extra={"operation": operation, "error": str(exc)}
            )
            raise StorageError(f"SQLite {operation} failed: {exc}", operation) from exc
        return cur

    def add(self, parcel: Parcel) -> ParcelNumber:
        cur = self._write(
            "add",
            "INSERT INTO parcel (client, status, address, created_at) VALUES (?, ?, ?, ?)",
            (parcel.client, parcel.status, parcel.address, parcel.created_at),
        )
        rowid = cur.lastrowid
        if rowid is None:
            raise StorageError("SQLite insert failed: no lastrowid (table: parcel)", "add")
        logger.debug("Parcel added", extra={"number": rowid, "client": parcel.client})
        return ParcelNumber(int(rowid))

    def get_by_client(self, client: ClientId) -> list[Parcel]:
        cur = self._execute(
            "get_by_client",
            f"SELECT {_COLUMNS} FROM parcel WHERE client = ? ORDER BY number",
            (client,),
        )
        try:
            rows = cur.fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"SQLite get_by_client failed: {exc}", "get_by_client") from exc
        return [Parcel(*row) for row in rows]

    def get(self, number: ParcelNumber) -> Parcel:
        cur = self._execute(
            "get",
            f"SELECT {_COLUMNS} FROM parcel WHERE number = ?",
            (number,),
        )
        try:
            row = cur.fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"SQLite get failed: {exc}", "get") from exc
        if row is None:
            raise ParcelNotFoundError(number)
        return Parcel(*row)

    def set_status(self, number: ParcelNumber, status: ParcelStatus | str) -> None:
        self._write(
            "set_status",
            "UPDATE parcel SET status = ? WHERE number = ?",
            (status, number),
        )
        logger.debug("Parcel status set", extra={"number": number, "status": _plain(status)})

    def set_address(self, number: ParcelNumber, address: str) -> None:
        self._write(
            "set_address",
            "UPDATE parcel SET address = ? WHERE number = ?",
            (address, number),
        )
        logger.debug("Parcel address set", extra={"number": number})

    def delete(self, number: ParcelNumber) -> None:
        self._write("delete", "DELETE FROM parcel WHERE number = ?", (number,))
        logger.debug("Parcel deleted", extra={"number": number})
