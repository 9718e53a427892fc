"""
SQLite implementation of the Storage protocol for large files.

Stores each record, including the raw binary payload, in one row of the
files table keyed by url. Writes are committed with synchronous=FULL so a
put() is durable when it returns.

This class should be obtained via Storage.large() or instantiated directly in tests.
"""

import sqlite3
import threading
from pathlib import Path
from typing import Any, List, Optional, Tuple

from storage.FileRecord import FileRecord, StorageTier, format_timestamp
from utils.Errors import StorageError
from utils.Logger import Logger


class StorageSQLLite:
    """
    SQLite implementation of the Storage protocol (LARGE tier).

    This class implements StorageProtocol. Type checkers will verify
    that all required protocol methods are present through structural typing.
    """

    tier = StorageTier.LARGE

    _schema_sql = """
    CREATE TABLE IF NOT EXISTS files (
        url TEXT PRIMARY KEY,
        fileName TEXT NOT NULL,
        contentType TEXT NOT NULL,
        size INTEGER NOT NULL,
        lastModified TEXT NOT NULL,
        blob BLOB NOT NULL,
        storage TEXT NOT NULL DEFAULT 'indexedDB'
    );

    CREATE INDEX IF NOT EXISTS idx_last_modified ON files(lastModified);
    """

    # Metadata columns; blob is only read when a single record is fetched.
    _metadata_columns = "url, fileName, contentType, size, lastModified"

    def __init__(self) -> None:
        self._connection: Optional[sqlite3.Connection] = None
        self._db_path: Optional[Path] = None
        self._initialized = False
        self._lock = threading.RLock()

    def _ensure_initialized(self) -> None:
        """
        Ensure storage is initialized and connection is available.

        Raises:
            StorageError: If storage is not initialized or connection is not available
        """
        if not self._initialized or self._connection is None:
            raise StorageError("SQLite store has not been initialized. Call initialize() first.")

    def _execute_query(
        self,
        query: str,
        parameters: Optional[Tuple[Any, ...]] = None,
        operation_name: str = "operation",
        commit: bool = True
    ) -> sqlite3.Cursor:
        """
        Execute a SQL query with error handling.

        Args:
            query: SQL query string
            parameters: Optional query parameters
            operation_name: Name of the operation for error messages
            commit: Whether to commit after execution (for non-SELECT queries)

        Returns:
            sqlite3.Cursor object

        Raises:
            StorageError: If storage is not initialized or the query fails
        """
        with self._lock:
            self._ensure_initialized()
            try:
                cursor = self._connection.execute(query, parameters or ())
                if commit:
                    self._connection.commit()
                return cursor
            except sqlite3.Error as e:
                Logger.error(f"Failed to {operation_name}: {e}")
                if commit:
                    self._connection.rollback()
                raise StorageError(f"Failed to {operation_name}: {e}") from e

    def initialize(self, path: Optional[Path] = None) -> None:
        """
        Initialize the database connection and create schema if needed.

        Args:
            path: Path to SQLite database file. If None, uses 'downloads_large.db'
                in the current working directory.

        Raises:
            StorageError: If the database cannot be opened
        """
        with self._lock:
            if self._initialized:
                return

            self._db_path = Path(path) if path is not None else Path.cwd() / "downloads_large.db"

            try:
                self._db_path.parent.mkdir(parents=True, exist_ok=True)

                self._connection = sqlite3.connect(
                    str(self._db_path),
                    check_same_thread=False,  # Downloads persist from worker threads
                    timeout=30.0
                )

                self._connection.execute("PRAGMA journal_mode=WAL")
                self._connection.execute("PRAGMA busy_timeout=30000")
                # FULL: a committed put survives power loss
                self._connection.execute("PRAGMA synchronous=FULL")

                self._connection.executescript(self._schema_sql)
                self._connection.commit()

                self._initialized = True
                Logger.info(f"SQLite store initialized: {self._db_path}")

            except (sqlite3.Error, OSError) as e:
                if self._connection is not None:
                    self._connection.close()
                self._connection = None
                self._initialized = False
                raise StorageError(f"Failed to initialize database at {self._db_path}: {e}") from e

    def put(self, record: FileRecord) -> None:
        """
        Insert or replace the row for record.url, payload included.

        Raises:
            StorageError: If the write fails
            ValueError: If the record has no payload
        """
        if record.payload is None:
            raise ValueError(f"Record for {record.url} has no payload")
        self._execute_query(
            "INSERT OR REPLACE INTO files (url, fileName, contentType, size, lastModified, blob, storage) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                record.url,
                record.file_name,
                record.content_type,
                record.size,
                format_timestamp(record.last_modified),
                sqlite3.Binary(record.payload),
                self.tier.value,
            ),
            operation_name=f"store {record.url}",
        )

    def _row_to_record(self, cursor: sqlite3.Cursor, row: Tuple[Any, ...]) -> FileRecord:
        column_names = [description[0] for description in cursor.description]
        return FileRecord.from_metadata(dict(zip(column_names, row)), storage_tier=self.tier)

    def get(self, url: str) -> Optional[FileRecord]:
        """
        Get a record by url with its payload loaded.

        Returns:
            The record, or None if not found
        """
        with self._lock:
            cursor = self._execute_query(
                f"SELECT {self._metadata_columns}, blob FROM files WHERE url = ?",
                (url,),
                operation_name=f"get {url}",
                commit=False
            )
            row = cursor.fetchone()
        if row is None:
            return None
        record = self._row_to_record(cursor, row)
        record.payload = bytes(row[-1])
        return record

    def exists(self, url: str) -> bool:
        with self._lock:
            cursor = self._execute_query(
                "SELECT EXISTS(SELECT 1 FROM files WHERE url = ?)",
                (url,),
                operation_name="check exists by url",
                commit=False
            )
            row = cursor.fetchone()
        return bool(row[0]) if row else False

    def delete(self, url: str) -> bool:
        """
        Delete a record by url.

        Returns:
            True if a row was deleted
        """
        cursor = self._execute_query(
            "DELETE FROM files WHERE url = ?",
            (url,),
            operation_name=f"delete {url}"
        )
        return cursor.rowcount > 0

    def list_records(self) -> List[FileRecord]:
        """List all records without their payloads. Rows that cannot be parsed are skipped."""
        with self._lock:
            cursor = self._execute_query(
                f"SELECT {self._metadata_columns} FROM files",
                None,
                operation_name="list records",
                commit=False
            )
            try:
                rows = cursor.fetchall()
            except sqlite3.Error as e:
                raise StorageError(f"Failed to list records: {e}") from e
        records: List[FileRecord] = []
        for row in rows:
            try:
                records.append(self._row_to_record(cursor, row))
            except (KeyError, TypeError, ValueError) as e:
                Logger.warning(f"Skipping unreadable row {row[0]!r}: {e}")
        return records

    def clear_all_records(self) -> None:
        """Delete all rows, keeping the table."""
        self._execute_query("DELETE FROM files", None, operation_name="clear all records")
        Logger.info("All records cleared from SQLite store")

    def close(self) -> None:
        """
        Close the database connection.

        Note: The connection will be automatically closed when the process exits,
        but this can be useful for explicit cleanup.
        """
        with self._lock:
            if self._connection:
                try:
                    self._connection.close()
                    Logger.debug("Database connection closed")
                except sqlite3.Error as e:
                    Logger.warning(f"Error closing database connection: {e}")
                finally:
                    self._connection = None
                    self._initialized = False

    def get_db_path(self) -> Path:
        """
        Get the path to the database file.

        Raises:
            StorageError: If Storage is not initialized
        """
        self._ensure_initialized()
        if self._db_path is None:
            raise StorageError("Database path is not set.")
        return self._db_path
