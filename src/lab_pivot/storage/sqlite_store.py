# ============================================================================
# src/lab_pivot/storage/sqlite_store.py
# ============================================================================
"""
SQLite Lab Store

Persists documents (ownership registry), lab results and pivot tables.
Raw sqlite3, JSON for complex fields.

Each session is one connection with one explicit transaction:
- writable sessions start with BEGIN IMMEDIATE so concurrent writers queue
  on the database lock instead of interleaving read-modify-write cycles
- pivot writes additionally compare-and-swap on a version column, so a
  table loaded in one session cannot silently overwrite a newer one
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from ..config.base_config import storage_settings
from ..domain.lab_result import LabResult
from ..domain.pivot import PivotTable
from ..utils.exceptions import ConcurrencyError, StorageError
from .base import LabSession, LabStore

logger = logging.getLogger(__name__)

# Keep IN (...) lists under SQLite's host parameter limit
_IN_CHUNK = 500


@contextmanager
def _storage_errors(operation: str):
    try:
        yield
    except sqlite3.Error as e:
        raise StorageError(f"{operation} failed: {e}") from e


class SqliteLabSession(LabSession):
    def __init__(self, conn: sqlite3.Connection, readonly: bool = False):
        self._conn = conn
        self._readonly = readonly
        self._closed = False
        self._begin()

    def _begin(self):
        with _storage_errors("begin transaction"):
            self._conn.execute("BEGIN" if self._readonly else "BEGIN IMMEDIATE")

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------
    def owner_of(self, document_id: str) -> Optional[str]:
        with _storage_errors("owner lookup"):
            row = self._conn.execute(
                "SELECT owner_id FROM documents WHERE id = ? AND deleted = 0",
                (document_id,)
            ).fetchone()
        return row[0] if row else None

    def document_ids_for_owner(self, owner_id: str) -> List[str]:
        with _storage_errors("document lookup"):
            rows = self._conn.execute(
                "SELECT id FROM documents WHERE owner_id = ? AND deleted = 0 ORDER BY id",
                (owner_id,)
            ).fetchall()
        return [r[0] for r in rows]

    # ------------------------------------------------------------------
    # Pivot tables
    # ------------------------------------------------------------------
    def load_pivot(self, owner_id: str) -> Optional[PivotTable]:
        with _storage_errors("pivot load"):
            row = self._conn.execute(
                "SELECT data, version FROM pivot_tables WHERE owner_id = ?",
                (owner_id,)
            ).fetchone()
        if not row:
            return None
        pivot = PivotTable.from_dict(json.loads(row[0]))
        pivot.version = row[1]
        return pivot

    def store_pivot(self, pivot: PivotTable) -> None:
        self._ensure_writable()
        with _storage_errors("pivot store"):
            current = self._conn.execute(
                "SELECT version FROM pivot_tables WHERE owner_id = ?",
                (pivot.owner_id,)
            ).fetchone()

            if current is None:
                if pivot.version != 0:
                    raise ConcurrencyError(
                        f"Pivot for owner {pivot.owner_id} was deleted concurrently",
                        owner_id=pivot.owner_id,
                        expected_version=pivot.version,
                    )
                new_version = 1
                self._conn.execute(
                    """
                    INSERT INTO pivot_tables (id, owner_id, version, updated_at, data)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (pivot.id, pivot.owner_id, new_version, datetime.now().isoformat(),
                     self._pivot_json(pivot, new_version))
                )
            else:
                new_version = pivot.version + 1
                cursor = self._conn.execute(
                    """
                    UPDATE pivot_tables
                    SET id = ?, version = ?, updated_at = ?, data = ?
                    WHERE owner_id = ? AND version = ?
                    """,
                    (pivot.id, new_version, datetime.now().isoformat(),
                     self._pivot_json(pivot, new_version), pivot.owner_id, pivot.version)
                )
                if cursor.rowcount == 0:
                    raise ConcurrencyError(
                        f"Pivot for owner {pivot.owner_id} changed since version {pivot.version}",
                        owner_id=pivot.owner_id,
                        expected_version=pivot.version,
                    )

        pivot.version = new_version

    def delete_pivot(self, owner_id: str) -> bool:
        self._ensure_writable()
        with _storage_errors("pivot delete"):
            cursor = self._conn.execute(
                "DELETE FROM pivot_tables WHERE owner_id = ?", (owner_id,)
            )
        return cursor.rowcount > 0

    @staticmethod
    def _pivot_json(pivot: PivotTable, version: int) -> str:
        data = pivot.to_dict()
        data["version"] = version
        return json.dumps(data)

    # ------------------------------------------------------------------
    # Lab results
    # ------------------------------------------------------------------
    def store_lab_result(self, result: LabResult) -> None:
        self._ensure_writable()
        with _storage_errors("lab result store"):
            self._conn.execute(
                """
                INSERT OR REPLACE INTO lab_results (id, document_id, result_date, data)
                VALUES (?, ?, ?, ?)
                """,
                (result.id, result.document_id, result.date.isoformat(),
                 json.dumps(result.to_dict()))
            )

    def load_lab_result(self, result_id: str) -> Optional[LabResult]:
        with _storage_errors("lab result load"):
            row = self._conn.execute(
                "SELECT data FROM lab_results WHERE id = ?", (result_id,)
            ).fetchone()
        return LabResult.from_dict(json.loads(row[0])) if row else None

    def delete_lab_result(self, result_id: str) -> bool:
        self._ensure_writable()
        with _storage_errors("lab result delete"):
            cursor = self._conn.execute(
                "DELETE FROM lab_results WHERE id = ?", (result_id,)
            )
        return cursor.rowcount > 0

    def lab_results_for_document(self, document_id: str) -> List[LabResult]:
        return self.lab_results_for_documents([document_id])

    def lab_results_for_documents(self, document_ids: Sequence[str]) -> List[LabResult]:
        ids = list(document_ids)
        results = []
        for start in range(0, len(ids), _IN_CHUNK):
            chunk = ids[start:start + _IN_CHUNK]
            placeholders = ",".join("?" for _ in chunk)
            with _storage_errors("lab result query"):
                rows = self._conn.execute(
                    f"""
                    SELECT data FROM lab_results
                    WHERE document_id IN ({placeholders})
                    ORDER BY result_date, id
                    """,
                    chunk
                ).fetchall()
            results.extend(LabResult.from_dict(json.loads(r[0])) for r in rows)
        return results

    # ------------------------------------------------------------------
    # Transaction
    # ------------------------------------------------------------------
    def save_changes(self) -> None:
        self._ensure_writable()
        with _storage_errors("commit"):
            self._conn.execute("COMMIT")
        self._begin()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            if self._conn.in_transaction:
                self._conn.execute("ROLLBACK")
        finally:
            self._conn.close()

    def _ensure_writable(self):
        if self._readonly:
            raise StorageError("Session was opened read-only")
        if self._closed:
            raise StorageError("Session is closed")


class SqliteLabStore(LabStore):
    """
    SQLite-backed store for lab results and pivot tables.
    """

    def __init__(self, db_path: Optional[Path] = None, timeout: Optional[float] = None):
        self.db_path = Path(db_path or storage_settings.LAB_PIVOT_DB_PATH)
        self.timeout = timeout if timeout is not None else storage_settings.SQLITE_TIMEOUT
        self._init_database()

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------
    def _init_database(self):
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect()
        try:
            with _storage_errors("schema setup"):
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS documents (
                        id        TEXT PRIMARY KEY,
                        owner_id  TEXT NOT NULL,
                        deleted   INTEGER NOT NULL DEFAULT 0
                    )
                """)
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS lab_results (
                        id           TEXT PRIMARY KEY,
                        document_id  TEXT NOT NULL,
                        result_date  TEXT NOT NULL,
                        data         TEXT NOT NULL
                    )
                """)
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS pivot_tables (
                        id          TEXT NOT NULL,
                        owner_id    TEXT PRIMARY KEY,
                        version     INTEGER NOT NULL,
                        updated_at  TEXT NOT NULL,
                        data        TEXT NOT NULL
                    )
                """)
                conn.execute("""
                    CREATE INDEX IF NOT EXISTS idx_documents_owner
                    ON documents (owner_id, deleted)
                """)
                conn.execute("""
                    CREATE INDEX IF NOT EXISTS idx_lab_results_document
                    ON lab_results (document_id)
                """)
        finally:
            conn.close()
        logger.info(f"Lab store initialized: {self.db_path}")

    def _connect(self) -> sqlite3.Connection:
        # isolation_level=None: transactions are issued explicitly by sessions
        return sqlite3.connect(str(self.db_path), timeout=self.timeout, isolation_level=None)

    def session(self, readonly: bool = False) -> SqliteLabSession:
        conn = self._connect()
        try:
            return SqliteLabSession(conn, readonly=readonly)
        except StorageError:
            conn.close()
            raise

    # ------------------------------------------------------------------
    # Document registry
    # ------------------------------------------------------------------
    def register_document(self, document_id: str, owner_id: str, deleted: bool = False) -> None:
        """Insert or update a document's ownership record."""
        conn = self._connect()
        try:
            with _storage_errors("document register"):
                conn.execute(
                    """
                    INSERT INTO documents (id, owner_id, deleted) VALUES (?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET owner_id = excluded.owner_id,
                                                  deleted = excluded.deleted
                    """,
                    (document_id, owner_id, 1 if deleted else 0)
                )
        finally:
            conn.close()

    def mark_document_deleted(self, document_id: str) -> bool:
        conn = self._connect()
        try:
            with _storage_errors("document delete"):
                cursor = conn.execute(
                    "UPDATE documents SET deleted = 1 WHERE id = ?", (document_id,)
                )
            return cursor.rowcount > 0
        finally:
            conn.close()
