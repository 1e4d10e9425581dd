"""DuckDB Document Store Adapter.

This adapter implements the DocumentStorePort contract on top of DuckDB, an
in-process database. Every document is one row of the ``documents`` table
holding its path, parent collection, id and a JSON payload.

Architecture:
    - Implements DocumentStorePort (Hexagonal Architecture)
    - Isolated from domain core - only depends on ports
    - ``atomic_write`` runs in a single transaction; any failure rolls back
    - Preconditions are evaluated inside the same transaction as the writes
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Any, Optional

import duckdb

from discharge_desk.adapters.storage.document_ops import (
    apply_operation,
    check_precondition,
    matches_field,
    order_documents,
)
from discharge_desk.domain.ports import (
    DocumentSnapshot,
    DocumentStorePort,
    Precondition,
    Result,
    StoreError,
    WriteOperation,
    split_document_path,
)
from discharge_desk.infrastructure.config_manager import StoreConfig

logger = logging.getLogger(__name__)

TIMESTAMP_KEY = "$timestamp"


def _encode_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return {TIMESTAMP_KEY: value.isoformat()}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _decode_hook(obj: dict) -> Any:
    if len(obj) == 1 and TIMESTAMP_KEY in obj:
        return datetime.fromisoformat(obj[TIMESTAMP_KEY])
    return obj


def encode_document(data: dict) -> str:
    return json.dumps(data, default=_encode_default)


def decode_document(payload: str) -> dict:
    return json.loads(payload, object_hook=_decode_hook)


class DuckDBDocumentStore(DocumentStorePort):
    """DuckDB implementation of DocumentStorePort.

    Parameters:
        store_config: StoreConfig from configuration manager (preferred)
        db_path: Path to DuckDB database file (or ':memory:' for in-memory)

    Example Usage:
        ```python
        from discharge_desk.infrastructure.config_manager import get_store_config

        store = DuckDBDocumentStore(store_config=get_store_config())
        result = store.query_by_field("patients", "status", "PendingDischarge")
        ```
    """

    def __init__(
        self,
        store_config: Optional[StoreConfig] = None,
        db_path: Optional[str] = None
    ):
        if store_config:
            if store_config.store_type != "duckdb":
                raise StoreError(
                    f"StoreConfig type '{store_config.store_type}' does not match DuckDB adapter",
                    operation="__init__"
                )
            self.db_path = store_config.db_path or ":memory:"
        elif db_path:
            self.db_path = db_path
        else:
            self.db_path = ":memory:"

        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        self._initialized = False
        self._lock = RLock()

        if self.db_path != ":memory:":
            db_path_obj = Path(self.db_path)
            if not db_path_obj.parent.exists():
                raise StoreError(
                    f"Database directory does not exist: {db_path_obj.parent}",
                    operation="__init__"
                )

    def _get_connection(self) -> duckdb.DuckDBPyConnection:
        """Get or create the DuckDB connection (created lazily, then reused)."""
        if self._connection is None:
            try:
                self._connection = duckdb.connect(self.db_path)
                logger.info(f"Connected to DuckDB database: {self.db_path}")
            except Exception as e:
                raise StoreError(
                    f"Failed to connect to DuckDB: {str(e)}",
                    operation="connect",
                    details={"db_path": self.db_path}
                )
        return self._connection

    def initialize_schema(self) -> Result[None]:
        """Create the documents table and its insertion-order sequence.

        Returns:
            Result[None]: Success or failure result
        """
        try:
            conn = self._get_connection()
            conn.execute("CREATE SEQUENCE IF NOT EXISTS document_seq START 1")
            conn.execute("""
                CREATE TABLE IF NOT EXISTS documents (
                    path VARCHAR PRIMARY KEY,
                    collection VARCHAR NOT NULL,
                    doc_id VARCHAR NOT NULL,
                    data VARCHAR NOT NULL,
                    seq BIGINT DEFAULT nextval('document_seq'),
                    updated_at TIMESTAMP NOT NULL
                )
            """)
            self._initialized = True
            logger.info("DuckDB document schema initialized")
            return Result.success_result(None)
        except Exception as e:
            error_msg = f"Failed to initialize schema: {str(e)}"
            logger.error(error_msg, exc_info=True)
            return Result.failure_result(
                StoreError(error_msg, operation="initialize_schema"),
                error_type="StoreError"
            )

    def _ensure_schema(self) -> None:
        if not self._initialized:
            init_result = self.initialize_schema()
            if not init_result.is_success():
                raise StoreError(init_result.error, operation="initialize_schema")

    def _read_collection(self, collection: str) -> list[tuple[str, dict]]:
        rows = self._get_connection().execute(
            "SELECT path, data FROM documents WHERE collection = ? ORDER BY seq",
            [collection.strip("/")]
        ).fetchall()
        return [(path, decode_document(data)) for path, data in rows]

    def _read_document(self, path: str) -> Optional[dict]:
        row = self._get_connection().execute(
            "SELECT data FROM documents WHERE path = ?", [path]
        ).fetchone()
        return None if row is None else decode_document(row[0])

    @staticmethod
    def _snapshot(path: str, data: dict) -> DocumentSnapshot:
        _, doc_id = split_document_path(path)
        return DocumentSnapshot(id=doc_id, path=path, data=data)

    def query_by_field(self, collection: str, field: str, equals: Any) -> Result[list[DocumentSnapshot]]:
        try:
            with self._lock:
                self._ensure_schema()
                rows = self._read_collection(collection)
            return Result.success_result([
                self._snapshot(path, data) for path, data in rows if matches_field(data, field, equals)
            ])
        except Exception as e:
            error_msg = f"Failed to query {collection}: {str(e)}"
            logger.error(error_msg, exc_info=True)
            return Result.failure_result(
                StoreError(error_msg, operation="query_by_field", details={"collection": collection}),
                error_type="StoreError"
            )

    def query_ordered_limit(
        self,
        collection: str,
        order_field: str,
        descending: bool = True,
        limit: int = 1
    ) -> Result[list[DocumentSnapshot]]:
        try:
            with self._lock:
                self._ensure_schema()
                rows = self._read_collection(collection)
            ordered = order_documents(rows, order_field, descending, limit)
            return Result.success_result([self._snapshot(path, data) for path, data in ordered])
        except Exception as e:
            error_msg = f"Failed to query {collection}: {str(e)}"
            logger.error(error_msg, exc_info=True)
            return Result.failure_result(
                StoreError(error_msg, operation="query_ordered_limit", details={"collection": collection}),
                error_type="StoreError"
            )

    def get_document(self, path: str) -> Result[Optional[DocumentSnapshot]]:
        path = path.strip("/")
        try:
            with self._lock:
                self._ensure_schema()
                data = self._read_document(path)
            return Result.success_result(None if data is None else self._snapshot(path, data))
        except Exception as e:
            error_msg = f"Failed to read {path}: {str(e)}"
            logger.error(error_msg, exc_info=True)
            return Result.failure_result(
                StoreError(error_msg, operation="get_document", details={"path": path}),
                error_type="StoreError"
            )

    def atomic_write(
        self,
        operations: list[WriteOperation],
        preconditions: Optional[list[Precondition]] = None
    ) -> Result[int]:
        """Apply all operations in one DuckDB transaction.

        Returns:
            Result[int]: Number of operations applied, or a failure whose
                error_type is PreconditionFailedError or StoreError
        """
        with self._lock:
            try:
                self._ensure_schema()
                conn = self._get_connection()
            except StoreError as e:
                return Result.failure_result(e)

            try:
                conn.begin()
            except Exception as e:
                return Result.failure_result(
                    StoreError(f"Failed to begin transaction: {str(e)}", operation="atomic_write"),
                    error_type="StoreError"
                )

            try:
                for precondition in preconditions or []:
                    check_precondition(self._read_document(precondition.path), precondition)

                commit_time = datetime.now(timezone.utc)
                row_time = commit_time.replace(tzinfo=None)
                for operation in operations:
                    collection, doc_id = split_document_path(operation.path)
                    current = self._read_document(operation.path)
                    new_data = apply_operation(current, operation, commit_time)
                    if current is None:
                        conn.execute(
                            "INSERT INTO documents (path, collection, doc_id, data, updated_at) VALUES (?, ?, ?, ?, ?)",
                            [operation.path, collection, doc_id, encode_document(new_data), row_time]
                        )
                    else:
                        conn.execute(
                            "UPDATE documents SET data = ?, updated_at = ? WHERE path = ?",
                            [encode_document(new_data), row_time, operation.path]
                        )

                conn.commit()
                logger.debug(f"Committed atomic write of {len(operations)} operation(s)")
                return Result.success_result(len(operations))

            except StoreError as e:
                self._rollback(conn)
                logger.warning(f"Atomic write rejected: {str(e)}")
                return Result.failure_result(e)
            except Exception as e:
                self._rollback(conn)
                error_msg = f"Failed to commit atomic write: {str(e)}"
                logger.error(error_msg, exc_info=True)
                return Result.failure_result(
                    StoreError(error_msg, operation="atomic_write", details={"operation_count": len(operations)}),
                    error_type="StoreError"
                )

    @staticmethod
    def _rollback(conn: duckdb.DuckDBPyConnection) -> None:
        try:
            conn.rollback()
        except Exception as e:
            # A failed COMMIT has already ended the transaction
            logger.debug(f"Rollback skipped: {str(e)}")

    def close(self) -> None:
        """Close storage connection and release resources."""
        if self._connection is not None:
            try:
                self._connection.close()
                self._connection = None
                self._initialized = False
                logger.info("Closed DuckDB connection")
            except Exception as e:
                logger.warning(f"Error closing connection: {str(e)}")
