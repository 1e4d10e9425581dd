"""In-Memory Document Store Adapter.

This adapter implements DocumentStorePort over a plain dictionary. It backs
the ``memory`` store type and is the fake store used throughout the tests.

Atomicity:
    ``atomic_write`` stages every change on a copy of the document map and
    swaps it in only after all preconditions and operations succeeded. A lock
    serializes writers, so readers never observe a partial write.
"""

import copy
import logging
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Callable, Optional

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

logger = logging.getLogger(__name__)


class InMemoryDocumentStore(DocumentStorePort):
    """Dictionary-backed implementation of DocumentStorePort.

    Parameters:
        documents: Optional initial documents keyed by document path
        clock: Callable returning the commit time (defaults to UTC now)

    Example Usage:
        ```python
        store = InMemoryDocumentStore({
            "patients/p1": {"name": "Ada", "status": "PendingDischarge"},
        })
        store.query_by_field("patients", "status", "PendingDischarge")
        ```
    """

    def __init__(
        self,
        documents: Optional[dict[str, dict]] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self._documents: dict[str, dict] = {}
        self._lock = Lock()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.commit_count = 0
        for path, data in (documents or {}).items():
            split_document_path(path)
            self._documents[path] = copy.deepcopy(data)

    def _snapshot(self, path: str, data: dict) -> DocumentSnapshot:
        _, doc_id = split_document_path(path)
        return DocumentSnapshot(id=doc_id, path=path, data=copy.deepcopy(data))

    def _collection_rows(self, collection: str) -> list[tuple[str, dict]]:
        collection = collection.strip("/")
        return [
            (path, data) for path, data in self._documents.items()
            if split_document_path(path)[0] == collection
        ]

    def query_by_field(self, collection: str, field: str, equals: Any) -> Result[list[DocumentSnapshot]]:
        with self._lock:
            rows = self._collection_rows(collection)
            return Result.success_result([
                self._snapshot(path, data) for path, data in rows if matches_field(data, field, equals)
            ])

    def query_ordered_limit(
        self,
        collection: str,
        order_field: str,
        descending: bool = True,
        limit: int = 1
    ) -> Result[list[DocumentSnapshot]]:
        with self._lock:
            rows = order_documents(self._collection_rows(collection), order_field, descending, limit)
            return Result.success_result([self._snapshot(path, data) for path, data in rows])

    def get_document(self, path: str) -> Result[Optional[DocumentSnapshot]]:
        with self._lock:
            data = self._documents.get(path.strip("/"))
            return Result.success_result(None if data is None else self._snapshot(path.strip("/"), data))

    def atomic_write(
        self,
        operations: list[WriteOperation],
        preconditions: Optional[list[Precondition]] = None
    ) -> Result[int]:
        with self._lock:
            staged = dict(self._documents)
            try:
                for precondition in preconditions or []:
                    check_precondition(staged.get(precondition.path), precondition)
                commit_time = self._clock()
                for operation in operations:
                    split_document_path(operation.path)
                    staged[operation.path] = apply_operation(staged.get(operation.path), operation, commit_time)
            except StoreError as e:
                logger.warning(f"Atomic write rejected: {str(e)}")
                return Result.failure_result(e)
            except ValueError as e:
                return Result.failure_result(
                    StoreError(str(e), operation="atomic_write"),
                    error_type="StoreError"
                )

            self._documents = staged
            self.commit_count += 1
            logger.debug(f"Committed atomic write of {len(operations)} operation(s)")
            return Result.success_result(len(operations))

    def dump(self) -> dict[str, dict]:
        """Copy of every stored document keyed by path."""
        with self._lock:
            return copy.deepcopy(self._documents)
